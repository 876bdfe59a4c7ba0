from __future__ import annotations
from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["admin", "teacher"]


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    role: str
    is_active: bool
    phone: Optional[str] = None
    expires_at: Optional[date] = None
    is_exempt: bool = False


class TeacherCreate(BaseModel):
    name: str
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None
    role: Role = "teacher"
    expires_at: Optional[date] = None
    is_exempt: bool = False


class TeacherUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    phone: Optional[str] = None
    is_active: Optional[bool] = None
    expires_at: Optional[date] = None
    is_exempt: Optional[bool] = None
