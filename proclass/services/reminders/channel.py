# proclass/services/reminders/channel.py
from __future__ import annotations

import logging
from typing import Callable, Protocol

import httpx

from proclass.integrations.twilio_client import TwilioClient, TwilioError
from proclass.utils.br import whatsapp_address
from .errors import ChannelSendError, ConfigurationError
from .records import ReminderPolicy, SendResult

logger = logging.getLogger(__name__)

# status do Twilio que já chegam como falha definitiva
FAILED_STATUSES = {"failed", "undelivered", "canceled"}


class MessagingChannel(Protocol):
    async def send(self, to: str, body: str) -> SendResult: ...


ChannelFactory = Callable[[ReminderPolicy], MessagingChannel]


class TwilioWhatsAppChannel:
    def __init__(self, client: TwilioClient, sender: str):
        self.client = client
        self.sender = whatsapp_address(sender)

    async def send(self, to: str, body: str) -> SendResult:
        """
        `to` já vem normalizado (só dígitos com DDI). Erros de transporte e do
        provedor viram ChannelSendError; status de falha vira SendResult(success=False).
        """
        try:
            data = await self.client.send_message(from_=self.sender, to=whatsapp_address(to), body=body)
        except TwilioError as e:
            raise ChannelSendError("provider_rejected", e.detail) from e
        except httpx.HTTPError as e:
            raise ChannelSendError("network_error", str(e)) from e

        status = (data.get("status") or "").lower()
        if status in FAILED_STATUSES:
            logger.info("Twilio devolveu status %s para %s", status, to)
            return SendResult(
                success=False,
                message_id=data.get("sid"),
                status=status,
                error=data.get("error_message") or f"status {status}",
            )
        return SendResult(success=True, message_id=data.get("sid"), status=status or None)


def twilio_channel_for(policy: ReminderPolicy) -> MessagingChannel:
    if not policy.has_credentials:
        raise ConfigurationError("missing_credentials", {"teacher_id": policy.teacher_id})
    client = TwilioClient(policy.account_sid, policy.auth_token)
    return TwilioWhatsAppChannel(client, policy.sender)
