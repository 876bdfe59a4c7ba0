from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_serializer, field_validator

MASKED_TOKEN = "••••••••"


# Entrada para criar/atualizar a configuração do professor
class WhatsAppConfigIn(BaseModel):
    teacher_id: Optional[int] = None
    account_sid: str = Field(..., min_length=1)
    auth_token: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    reminder_days: Optional[int] = Field(default=None, ge=0)
    reminder_message: Optional[str] = None
    enabled: Optional[bool] = None
    auto_send_enabled: Optional[bool] = None
    auto_send_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    timezone: Optional[str] = None


# Saída: o auth_token nunca volta inteiro
class WhatsAppConfigOut(BaseModel):
    teacher_id: int
    account_sid: str
    auth_token: str = MASKED_TOKEN
    phone_number: str
    reminder_days: int
    reminder_message: str
    enabled: bool
    auto_send_enabled: bool
    auto_send_time: str
    timezone: str

    @field_validator("auth_token", mode="before")
    @classmethod
    def _mask(cls, v):
        return MASKED_TOKEN if v else ""

    model_config = {"from_attributes": True}


class SendSingleIn(BaseModel):
    teacher_id: Optional[int] = None
    phone: str = Field(..., min_length=1)
    student_name: Optional[str] = None
    amount: Optional[Decimal] = None
    due_day: Optional[int] = None
    custom_message: Optional[str] = None


class SendSingleOut(BaseModel):
    success: bool
    message_id: Optional[str] = None
    status: Optional[str] = None
    error: Optional[str] = None


class TeacherIn(BaseModel):
    teacher_id: Optional[int] = None


class StudentOutcomeOut(BaseModel):
    student_id: Optional[int] = None
    student_name: Optional[str] = None
    outcome: str
    reason: Optional[str] = None
    is_overdue: bool = False
    message_id: Optional[str] = None
    error: Optional[str] = None

    model_config = {"from_attributes": True}


class BatchResultOut(BaseModel):
    teacher_id: int
    reference_month: Optional[str] = None
    processed: int
    sent: int
    failed: int
    skipped: int
    outcomes: List[StudentOutcomeOut] = []
    message: Optional[str] = None

    model_config = {"from_attributes": True}


class AlertOut(BaseModel):
    student_id: int
    student_name: str
    phone: Optional[str] = None
    amount: Optional[float] = None
    due_day: Optional[int] = None
    decision: str
    is_overdue: bool
    already_reminded: bool


class ReminderLogOut(BaseModel):
    student_id: int
    reference_month: str
    delivery_status: str
    channel_message_id: Optional[str] = None
    error_detail: Optional[str] = None
    amount_at_send: Optional[Decimal] = None
    due_day_at_send: Optional[int] = None
    sent_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_serializer("amount_at_send")
    def _serialize_amount(self, v: Optional[Decimal], _info):
        return float(v) if v is not None else None
