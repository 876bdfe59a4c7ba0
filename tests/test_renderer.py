from decimal import Decimal

from proclass.modules.whatsapp.models import DEFAULT_REMINDER_MESSAGE
from proclass.services.reminders.records import StudentRecord
from proclass.services.reminders.renderer import (
    OVERDUE_BANNER, OVERDUE_FOOTER, fill_placeholders, format_amount, render_message,
)

ANA = StudentRecord(id=1, name="Ana", phone="5511988887777", monthly_fee=Decimal("150"), payment_day=10)


def test_literal_substitution():
    out = render_message("Aluno: {aluno} Valor: {valor} Dia {vencimento}", ANA, 150, 10)
    assert out == "Aluno: Ana Valor: 150.00 Dia 10"


def test_only_first_occurrence_is_replaced():
    out = fill_placeholders("{aluno} e {aluno}", "Ana", 10, 5)
    assert out == "Ana e {aluno}"


def test_overdue_wraps_body():
    out = render_message("Oi {aluno}", ANA, Decimal("99.9"), 10, is_overdue=True)
    assert out == f"{OVERDUE_BANNER}\n\nOi Ana\n\n{OVERDUE_FOOTER}"


def test_amount_format():
    assert format_amount(Decimal("1234.5")) == "1234.50"
    assert format_amount(0.1) == "0.10"
    assert format_amount(None) == "0,00"


def test_missing_values_for_single_send():
    out = fill_placeholders("{aluno}|{valor}|{vencimento}", None, None, None)
    assert out == "|0,00|"


def test_default_template_has_all_placeholders():
    out = render_message(DEFAULT_REMINDER_MESSAGE, ANA, ANA.monthly_fee, ANA.payment_day)
    assert "Aluno: Ana" in out
    assert "Valor: R$ 150.00" in out
    assert "Vencimento: Dia 10" in out
    assert "{" not in out
