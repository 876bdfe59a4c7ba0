from __future__ import annotations
import datetime as dt
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

LessonStatus = Literal["scheduled", "completed", "cancelled", "missed"]


class LessonCreate(BaseModel):
    date: dt.date
    start_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    student_id: Optional[int] = None
    subject: Optional[str] = None
    content_covered: Optional[str] = None
    status: LessonStatus = "scheduled"
    attendance: Optional[str] = None


class LessonUpdate(BaseModel):
    date: Optional[dt.date] = None
    start_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    subject: Optional[str] = None
    content_covered: Optional[str] = None
    status: Optional[LessonStatus] = None
    attendance: Optional[str] = None


class LessonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    teacher_id: int
    student_id: Optional[int] = None
    date: dt.date
    start_time: Optional[str] = None
    subject: Optional[str] = None
    content_covered: Optional[str] = None
    status: str
    attendance: Optional[str] = None
    end_of_cycle: bool = False


class CycleOut(BaseModel):
    cycle_completed: bool
    completed_lessons: int
    contracted_lessons: int
    marker_created: bool


class LessonWriteOut(BaseModel):
    lesson: LessonOut
    cycle: Optional[CycleOut] = None
