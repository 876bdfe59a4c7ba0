from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Integer,
    String,
    Date,
    ForeignKey,
    Numeric,
    Text,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from proclass.db.base import Base, TimestampMixin
from proclass.modules.students.models import Student as StudentModel

STATUS_CHOICES = ("pending", "paid", "overdue", "cancelled")


class Payment(Base, TimestampMixin):
    __tablename__ = "payments"

    __table_args__ = (
        # guarda só valores conhecidos de status
        CheckConstraint(
            f"status in {STATUS_CHOICES}",
            name="ck_payment_status_valido",
        ),
        # (student, reference_month) NÃO é único: o lembrete só assume isso
        Index("ix_payment_teacher_student", "teacher_id", "student_id"),
        Index("ix_payment_teacher_reference", "teacher_id", "reference_month"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )

    student_id: Mapped[int] = mapped_column(
        ForeignKey(f"{StudentModel.__tablename__}.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[str] = mapped_column(String(16), default="pending", nullable=False)

    # "YYYY-MM" (ex.: "2025-08") - período de cobrança, independente das datas abaixo
    reference_month: Mapped[str | None] = mapped_column(String(7), nullable=True, index=True)

    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # pix/dinheiro/cartao/etc.
    payment_method: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
