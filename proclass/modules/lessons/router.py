from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from proclass.core.dependencies import get_db, get_current_user
from proclass.modules.users.models import User
from proclass.modules.students.crud import get_student_or_404
from proclass.services.lesson_cycle import apply_status_change
from .models import Lesson
from .schemas import LessonCreate, LessonUpdate, LessonOut, LessonWriteOut, CycleOut

router = APIRouter(tags=["Aulas"])


async def _get_lesson_or_404(db: AsyncSession, teacher_id: int, lesson_id: int) -> Lesson:
    res = await db.execute(select(Lesson).where(Lesson.id == lesson_id, Lesson.teacher_id == teacher_id))
    lesson = res.scalar_one_or_none()
    if not lesson:
        raise HTTPException(status_code=404, detail="Aula não encontrada")
    return lesson


@router.get("", response_model=List[LessonOut])
async def list_lessons(
    student_id: Optional[int] = Query(None),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    stmt = select(Lesson).where(Lesson.teacher_id == me.id)
    if student_id:
        stmt = stmt.where(Lesson.student_id == student_id)
    if start:
        stmt = stmt.where(Lesson.date >= start)
    if end:
        stmt = stmt.where(Lesson.date <= end)
    res = await db.execute(stmt.order_by(Lesson.date.desc(), Lesson.start_time.desc()))
    return res.scalars().all()


@router.post("", response_model=LessonWriteOut, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    payload: LessonCreate,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    student = None
    if payload.student_id is not None:
        student = await get_student_or_404(db, me.id, payload.student_id)

    data = payload.model_dump()
    if not data.get("subject") and student is not None:
        data["subject"] = student.subject
    lesson = Lesson(teacher_id=me.id, **data)
    db.add(lesson)

    cycle = None
    if student is not None:
        cycle = await apply_status_change(db, student, lesson.status, None)

    await db.commit()
    await db.refresh(lesson)
    return LessonWriteOut(
        lesson=LessonOut.model_validate(lesson),
        cycle=CycleOut(**vars(cycle)) if cycle else None,
    )


@router.put("/{lesson_id}", response_model=LessonWriteOut)
async def update_lesson(
    lesson_id: int,
    payload: LessonUpdate,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    lesson = await _get_lesson_or_404(db, me.id, lesson_id)
    previous_status = lesson.status

    for k, v in payload.model_dump(exclude_unset=True).items():
        if v is not None:
            setattr(lesson, k, v)

    cycle = None
    if lesson.student_id is not None and not lesson.end_of_cycle and lesson.status != previous_status:
        student = await get_student_or_404(db, me.id, lesson.student_id)
        cycle = await apply_status_change(db, student, lesson.status, previous_status)

    await db.commit()
    await db.refresh(lesson)
    return LessonWriteOut(
        lesson=LessonOut.model_validate(lesson),
        cycle=CycleOut(**vars(cycle)) if cycle else None,
    )


@router.delete("/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lesson(
    lesson_id: int,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    lesson = await _get_lesson_or_404(db, me.id, lesson_id)
    await db.delete(lesson)
    await db.commit()
    return Response(status_code=204)
