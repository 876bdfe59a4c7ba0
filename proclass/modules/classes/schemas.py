from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_serializer

HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


class ClassCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: str = Field(..., pattern=HHMM)
    end_time: str = Field(..., pattern=HHMM)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    active: bool = True
    student_ids: List[int] = Field(default_factory=list)


class ClassUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: Optional[str] = Field(default=None, pattern=HHMM)
    end_time: Optional[str] = Field(default=None, pattern=HHMM)
    price: Optional[Decimal] = Field(default=None, ge=0)
    active: Optional[bool] = None
    # None = não mexe na matrícula; [] = esvazia a turma
    student_ids: Optional[List[int]] = None


class ClassStudentOut(BaseModel):
    id: int
    name: str


class ClassOut(BaseModel):
    id: int
    teacher_id: int
    title: str
    description: Optional[str] = None
    day_of_week: int
    start_time: str
    end_time: str
    price: Decimal
    active: bool
    students: List[ClassStudentOut] = []
    student_count: int = 0
    created_at: datetime
    updated_at: datetime

    @field_serializer("price")
    def _serialize_price(self, v: Decimal, _info):
        return float(v)
