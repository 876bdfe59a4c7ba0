import re
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

COUNTRY_CODE = "55"


def only_digits(s: str | None) -> str:
    return re.sub(r"\D+", "", s or "")


def normalize_mobile_phone(value: str | None) -> str | None:
    # cadastro guarda só dígitos
    digits = only_digits(value)
    return digits or None


def normalize_whatsapp_phone(value: str | None) -> str:
    """Só dígitos, com DDI 55 na frente quando ainda não tiver."""
    digits = only_digits(value)
    if not digits.startswith(COUNTRY_CODE):
        digits = COUNTRY_CODE + digits
    return digits


def whatsapp_address(value: str) -> str:
    if value.startswith("whatsapp:"):
        return value
    if value.startswith("+"):
        return f"whatsapp:{value}"
    return f"whatsapp:+{normalize_whatsapp_phone(value)}"


# ---------- competência "YYYY-MM" ----------
def reference_month(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def ym_to_year_month(ym: str) -> tuple[int, int]:
    y, m = ym.split("-")
    yi = int(y); mi = int(m)
    if mi < 1 or mi > 12:
        raise ValueError("Mês inválido em competência (use YYYY-MM).")
    return yi, mi


def normalize_reference_month(raw: str) -> str:
    """Aceita 'YYYY-MM' ou 'YYYY-MM-DD' e retorna 'YYYY-MM'."""
    s = raw.strip()
    if len(s) >= 7:
        s = s[:7]
    ym_to_year_month(s)  # valida
    return s


def local_today(tz_name: str | None, fallback: str = "America/Sao_Paulo") -> date:
    try:
        tz = ZoneInfo(tz_name or fallback)
    except (ZoneInfoNotFoundError, ValueError):
        tz = ZoneInfo(fallback)
    return datetime.now(tz).date()
