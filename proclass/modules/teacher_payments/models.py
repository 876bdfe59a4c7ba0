from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Integer, String, Date, ForeignKey, Numeric, Text, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from proclass.db.base import Base, TimestampMixin

STATUS_CHOICES = ("pending", "paid", "cancelled")


class TeacherPayment(Base, TimestampMixin):
    """Repasse da escola para o professor; só o admin mexe."""

    __tablename__ = "teacher_payments"

    __table_args__ = (
        CheckConstraint(
            f"status in {STATUS_CHOICES}",
            name="ck_teacher_payment_status_valido",
        ),
        Index("ix_teacher_payment_reference", "teacher_id", "reference_month"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # professor pode ter sido removido; o nome fica gravado
    teacher_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True
    )
    teacher_name: Mapped[str] = mapped_column(String(200), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="pending", nullable=False)
    reference_month: Mapped[str | None] = mapped_column(String(7), nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
