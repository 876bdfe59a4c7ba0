from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from proclass.modules.payments.schemas import ReferenceMonth

TeacherPaymentStatus = Literal["pending", "paid", "cancelled"]


class TeacherPaymentCreate(BaseModel):
    teacher_id: Optional[int] = None
    teacher_name: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    status: TeacherPaymentStatus = "pending"
    reference_month: ReferenceMonth = None
    due_date: Optional[date] = None
    payment_date: Optional[date] = None
    description: Optional[str] = None


class TeacherPaymentUpdate(BaseModel):
    teacher_id: Optional[int] = None
    teacher_name: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    status: Optional[TeacherPaymentStatus] = None
    reference_month: ReferenceMonth = None
    due_date: Optional[date] = None
    payment_date: Optional[date] = None
    description: Optional[str] = None


class TeacherPaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    teacher_id: Optional[int] = None
    teacher_name: str
    amount: Decimal
    status: str
    reference_month: Optional[str] = None
    due_date: Optional[date] = None
    payment_date: Optional[date] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("amount")
    def _serialize_amount(self, v: Decimal, _info):
        return float(v)
