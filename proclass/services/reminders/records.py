# proclass/services/reminders/records.py
"""
Registros simples (sem ORM) que o motor de lembretes consome.

Os repositórios convertem as linhas do banco para estes tipos, então o avaliador
e o agendador não dependem de sessão nem de tecnologia de armazenamento.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from proclass.modules.whatsapp.models import DEFAULT_REMINDER_MESSAGE


@dataclass(frozen=True)
class StudentRecord:
    id: int
    name: str
    phone: Optional[str] = None
    status: str = "active"
    monthly_fee: Optional[Decimal] = None
    payment_day: Optional[int] = None
    charge_fee: bool = True


@dataclass(frozen=True)
class PaymentRecord:
    id: int
    student_id: int
    teacher_id: int
    amount: Decimal
    status: str
    reference_month: Optional[str] = None


@dataclass(frozen=True)
class ReminderPolicy:
    teacher_id: int
    lead_days: int = 3
    message_template: str = DEFAULT_REMINDER_MESSAGE
    enabled: bool = True
    auto_send_enabled: bool = False
    account_sid: Optional[str] = None
    auth_token: Optional[str] = None
    sender: Optional[str] = None
    timezone: str = "America/Sao_Paulo"

    @property
    def has_credentials(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.sender)


@dataclass
class ReminderLogEntry:
    teacher_id: int
    student_id: int
    reference_month: str
    delivery_status: str
    channel_message_id: Optional[str] = None
    error_detail: Optional[str] = None
    amount_at_send: Optional[Decimal] = None
    due_day_at_send: Optional[int] = None
    sent_at: Optional[datetime] = None


@dataclass(frozen=True)
class SendResult:
    success: bool
    message_id: Optional[str] = None
    status: Optional[str] = None
    error: Optional[str] = None


@dataclass
class StudentOutcome:
    student_id: Optional[int]
    student_name: Optional[str]
    outcome: str                     # sent | failed | skipped
    reason: Optional[str] = None     # already_sent | not_due | ineligible | ...
    is_overdue: bool = False
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BatchResult:
    teacher_id: int
    reference_month: Optional[str] = None
    processed: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    outcomes: list[StudentOutcome] = field(default_factory=list)
    message: Optional[str] = None

    def add(self, outcome: StudentOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.outcome == "sent":
            self.sent += 1
            self.processed += 1
        elif outcome.outcome == "failed":
            self.failed += 1
            self.processed += 1
        else:
            self.skipped += 1
