from __future__ import annotations
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_serializer
from datetime import date
from decimal import Decimal
from typing import List, Optional, Literal

StudentStatus = Literal["active", "inactive", "trial"]


class StudentBase(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    subject: Optional[str] = None
    status: StudentStatus = "active"
    monthly_fee: Optional[Decimal] = Field(default=None, ge=0)
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)
    charge_fee: bool = True
    contracted_lessons: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    notes: Optional[str] = None


class StudentCreate(StudentBase):
    pass


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    subject: Optional[str] = None
    status: Optional[StudentStatus] = None
    monthly_fee: Optional[Decimal] = Field(default=None, ge=0)
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)
    charge_fee: Optional[bool] = None
    contracted_lessons: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    notes: Optional[str] = None


class StudentOut(StudentBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    teacher_id: int
    completed_lessons_in_cycle: int = 0
    end_of_cycle: bool = False

    @field_serializer("monthly_fee")
    def _serialize_fee(self, v: Optional[Decimal], _info):
        return float(v) if v is not None else None


class StudentImportIn(BaseModel):
    """Lote de alunos (ex.: planilha convertida para JSON). Aceita a chave "alunos"."""
    teacher_id: Optional[int] = None
    students: List[StudentCreate] = Field(
        default_factory=list, validation_alias=AliasChoices("students", "alunos")
    )
    dry_run: bool = False


class StudentImportOut(BaseModel):
    success: bool = True
    dry_run: bool
    received: int
    created: int
    skipped: int
    created_ids: List[int] = []
