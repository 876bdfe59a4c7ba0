from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String, Boolean, Integer, ForeignKey, UniqueConstraint, DateTime, Numeric, Text, func,
)
from proclass.db.base import Base, TimestampMixin

DEFAULT_REMINDER_MESSAGE = """Olá! Este é um lembrete de pagamento da mensalidade.

Aluno: {aluno}
Valor: R$ {valor}
Vencimento: Dia {vencimento}

Por favor, entre em contato para regularizar."""

DELIVERY_SENT = "sent"
DELIVERY_FAILED = "failed"


class WhatsAppConfig(Base, TimestampMixin):
    """Política de lembretes do professor + credenciais Twilio dele."""
    __tablename__ = "whatsapp_configs"
    __table_args__ = (UniqueConstraint("teacher_id", name="uq_whatsapp_config_teacher"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    account_sid: Mapped[str] = mapped_column(String(64), nullable=False)
    auth_token: Mapped[str] = mapped_column(String(512), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(40), nullable=False)  # remetente (whatsapp:+55...)

    reminder_days: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    reminder_message: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_REMINDER_MESSAGE)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_send_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    auto_send_time: Mapped[str] = mapped_column(String(5), nullable=False, default="09:00")
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="America/Sao_Paulo")


class ReminderLog(Base):
    """Registro append-only de tentativas de lembrete (1 por professor/aluno/competência)."""
    __tablename__ = "reminder_logs"
    __table_args__ = (
        UniqueConstraint("teacher_id", "student_id", "reference_month", name="uq_reminder_log_competencia"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    student_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    reference_month: Mapped[str] = mapped_column(String(7), nullable=False)

    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now(), nullable=False)
    channel_message_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    delivery_status: Mapped[str] = mapped_column(String(16), nullable=False)  # sent | failed
    error_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount_at_send: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    due_day_at_send: Mapped[int | None] = mapped_column(Integer, nullable=True)
