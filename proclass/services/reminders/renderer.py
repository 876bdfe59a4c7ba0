# proclass/services/reminders/renderer.py
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Union

from .records import StudentRecord

OVERDUE_BANNER = "⚠️ PAGAMENTO EM ATRASO ⚠️"
OVERDUE_FOOTER = "Estamos aguardando sua regularização."

Number = Union[int, float, Decimal]


def format_amount(amount: Optional[Number]) -> str:
    # 2 casas, ponto decimal, sem separador de milhar
    if amount is None:
        return "0,00"
    return f"{Decimal(str(amount)):.2f}"


def fill_placeholders(
    template: str,
    student_name: Optional[str],
    amount: Optional[Number],
    due_day: Optional[int],
) -> str:
    # replace com count=1: só a primeira ocorrência de cada variável
    return (
        template
        .replace("{aluno}", student_name or "", 1)
        .replace("{valor}", format_amount(amount), 1)
        .replace("{vencimento}", str(due_day) if due_day is not None else "", 1)
    )


def render_message(
    template: str,
    student: StudentRecord,
    amount: Number,
    due_day: int,
    is_overdue: bool = False,
) -> str:
    body = fill_placeholders(template, student.name, amount, due_day)
    if is_overdue:
        return f"{OVERDUE_BANNER}\n\n{body}\n\n{OVERDUE_FOOTER}"
    return body
