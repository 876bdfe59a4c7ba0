# proclass/modules/payments/schemas.py
from __future__ import annotations
from typing import Annotated, Optional, List, Literal
from datetime import date, datetime
from decimal import Decimal
from pydantic import AfterValidator, BaseModel, Field, ConfigDict, field_serializer

from proclass.utils.br import normalize_reference_month

PaymentStatus = Literal["pending", "paid", "overdue", "cancelled"]


def _validate_reference_month(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    try:
        return normalize_reference_month(v)
    except ValueError as e:
        raise ValueError("reference_month deve ser YYYY-MM") from e


ReferenceMonth = Annotated[Optional[str], AfterValidator(_validate_reference_month)]


class PaymentCreate(BaseModel):
    student_id: int
    amount: Decimal = Field(..., gt=0)
    reference_month: ReferenceMonth = None
    due_date: Optional[date] = None
    payment_date: Optional[date] = None
    status: PaymentStatus = "pending"
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    reference_month: ReferenceMonth = None
    due_date: Optional[date] = None
    payment_date: Optional[date] = None
    status: Optional[PaymentStatus] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    teacher_id: int
    student_id: int
    amount: Decimal
    status: str
    reference_month: Optional[str] = None
    due_date: Optional[date] = None
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("amount")
    def _serialize_amount(self, v: Decimal, _info):
        return float(v)


class PaymentListOut(BaseModel):
    items: List[PaymentOut]
    total: int


class MarkOverdueOut(BaseModel):
    updated: int
