# proclass/services/reminders/repositories.py
"""
Contratos de leitura usados pelo motor de lembretes + implementação SQLAlchemy.
"""
from __future__ import annotations

from typing import Optional, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from proclass.modules.payments.models import Payment
from proclass.modules.students.models import Student
from proclass.modules.whatsapp.models import WhatsAppConfig
from .records import StudentRecord, PaymentRecord, ReminderPolicy


class StudentRepository(Protocol):
    async def list_for_teacher(self, teacher_id: int) -> Sequence[StudentRecord]: ...


class PaymentRepository(Protocol):
    async def list_for_teacher(self, teacher_id: int) -> Sequence[PaymentRecord]: ...


class PolicyRepository(Protocol):
    async def get(self, teacher_id: int) -> Optional[ReminderPolicy]: ...

    async def teachers_with_auto_send(self) -> Sequence[int]: ...


def student_record(st: Student) -> StudentRecord:
    return StudentRecord(
        id=st.id,
        name=st.name,
        phone=st.phone,
        status=st.status,
        monthly_fee=st.monthly_fee,
        payment_day=st.payment_day,
        charge_fee=st.charge_fee,
    )


def payment_record(p: Payment) -> PaymentRecord:
    return PaymentRecord(
        id=p.id,
        student_id=p.student_id,
        teacher_id=p.teacher_id,
        amount=p.amount,
        status=p.status,
        reference_month=p.reference_month,
    )


def policy_record(cfg: WhatsAppConfig) -> ReminderPolicy:
    return ReminderPolicy(
        teacher_id=cfg.teacher_id,
        lead_days=cfg.reminder_days or 0,
        message_template=cfg.reminder_message,
        enabled=cfg.enabled,
        auto_send_enabled=cfg.auto_send_enabled,
        account_sid=cfg.account_sid,
        auth_token=cfg.auth_token,
        sender=cfg.phone_number,
        timezone=cfg.timezone,
    )


class SqlStudentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_teacher(self, teacher_id: int) -> list[StudentRecord]:
        res = await self.db.execute(select(Student).where(Student.teacher_id == teacher_id))
        return [student_record(st) for st in res.scalars().all()]


class SqlPaymentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_teacher(self, teacher_id: int) -> list[PaymentRecord]:
        res = await self.db.execute(select(Payment).where(Payment.teacher_id == teacher_id))
        return [payment_record(p) for p in res.scalars().all()]


class SqlPolicyRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, teacher_id: int) -> Optional[ReminderPolicy]:
        res = await self.db.execute(select(WhatsAppConfig).where(WhatsAppConfig.teacher_id == teacher_id))
        cfg = res.scalar_one_or_none()
        return policy_record(cfg) if cfg else None

    async def teachers_with_auto_send(self) -> list[int]:
        res = await self.db.execute(
            select(WhatsAppConfig.teacher_id).where(
                WhatsAppConfig.enabled.is_(True),
                WhatsAppConfig.auto_send_enabled.is_(True),
            ).order_by(WhatsAppConfig.teacher_id)
        )
        return list(res.scalars().all())
