# proclass/integrations/twilio_client.py
from __future__ import annotations
from typing import Any, Dict, Optional
import httpx

from proclass.core.config import settings


class TwilioClient:
    """Cliente mínimo da API REST de mensagens do Twilio (usado para WhatsApp)."""

    def __init__(self, account_sid: str, auth_token: str,
                 base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.account_sid = account_sid
        self._auth = (account_sid, auth_token)
        self.base_url = (base_url or settings.TWILIO_API_BASE).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.TWILIO_TIMEOUT
        self._headers = {"accept": "application/json"}
        self._transport = transport

    async def send_message(self, *, from_: str, to: str, body: str) -> Dict[str, Any]:
        payload = {"From": from_, "To": to, "Body": body}
        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            r = await client.post(url, data=payload, auth=self._auth, headers=self._headers)
            if r.status_code >= 400:
                # Twilio devolve {"code": 21211, "message": "...", "status": 400}
                try:
                    data = r.json()
                except ValueError:
                    data = {"message": r.text}
                data["_status_code"] = r.status_code
                raise TwilioError("send_message_failed", data)
            return r.json()


class TwilioError(RuntimeError):
    def __init__(self, code: str, data: Any):
        super().__init__(code)
        self.code = code
        self.data = data

    @property
    def detail(self) -> str:
        if isinstance(self.data, dict):
            msg = self.data.get("message") or self.code
            twilio_code = self.data.get("code")
            return f"{twilio_code}: {msg}" if twilio_code else str(msg)
        return str(self.data or self.code)
