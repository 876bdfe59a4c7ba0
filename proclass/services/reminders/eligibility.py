# proclass/services/reminders/eligibility.py
"""
Regra única de "este aluno deve receber lembrete hoje?".

Função pura: recebe aluno, pagamentos, data e política; não faz I/O.
Usada pelo job agendado, pelo envio manual em lote e pela lista de alertas.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable

from proclass.utils.br import reference_month
from .records import StudentRecord, PaymentRecord, ReminderPolicy

# um pagamento nestes status "cobre" a competência
COVERING_STATUSES = frozenset({"paid", "pending"})


class DecisionKind(str, Enum):
    SEND = "send"
    ALREADY_SENT = "already_sent"
    NOT_DUE = "not_due"
    INELIGIBLE = "ineligible"


@dataclass(frozen=True)
class Decision:
    kind: DecisionKind
    is_overdue: bool = False

    @property
    def should_send(self) -> bool:
        return self.kind is DecisionKind.SEND


SKIP_ALREADY_SENT = Decision(DecisionKind.ALREADY_SENT)
SKIP_NOT_DUE = Decision(DecisionKind.NOT_DUE)
SKIP_INELIGIBLE = Decision(DecisionKind.INELIGIBLE)


def is_base_eligible(student: StudentRecord) -> bool:
    return (
        student.status == "active"
        and student.charge_fee is not False
        and student.monthly_fee is not None
        and student.payment_day is not None
        and bool(student.phone)
    )


def has_covering_payment(student_id: int, payments: Iterable[PaymentRecord], month: str) -> bool:
    return any(
        p.student_id == student_id
        and p.reference_month == month
        and p.status in COVERING_STATUSES
        for p in payments
    )


def evaluate(
    student: StudentRecord,
    payments: Iterable[PaymentRecord],
    today: date,
    policy: ReminderPolicy,
) -> Decision:
    if not is_base_eligible(student):
        return SKIP_INELIGIBLE

    if has_covering_payment(student.id, payments, reference_month(today)):
        return SKIP_ALREADY_SENT

    due_day = student.payment_day
    current_day = today.day
    # sem "volta" para o mês anterior: target_day <= 0 nunca bate
    target_day = due_day - policy.lead_days

    is_overdue = current_day > due_day
    if is_overdue or current_day == target_day:
        return Decision(DecisionKind.SEND, is_overdue=is_overdue)
    return SKIP_NOT_DUE
