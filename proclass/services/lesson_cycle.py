# proclass/services/lesson_cycle.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from proclass.modules.lessons.models import Lesson
from proclass.modules.students.models import Student
from proclass.utils.br import reference_month, ym_to_year_month

logger = logging.getLogger(__name__)

COMPLETED = "completed"


@dataclass
class CycleUpdate:
    cycle_completed: bool
    completed_lessons: int
    contracted_lessons: int
    marker_created: bool


def _month_bounds(d: date) -> tuple[date, date]:
    y, m = ym_to_year_month(reference_month(d))
    start = date(y, m, 1)
    end = date(y + 1, 1, 1) if m == 12 else date(y, m + 1, 1)
    return start, end


async def _has_marker_this_month(db: AsyncSession, student_id: int, today: date) -> bool:
    start, end = _month_bounds(today)
    n = await db.scalar(
        select(func.count()).select_from(Lesson).where(
            Lesson.student_id == student_id,
            Lesson.end_of_cycle.is_(True),
            Lesson.date >= start,
            Lesson.date < end,
        )
    )
    return bool(n)


async def apply_status_change(
    db: AsyncSession,
    student: Student,
    new_status: str,
    previous_status: Optional[str],
    today: Optional[date] = None,
) -> CycleUpdate:
    """
    Atualiza o contador de aulas concluídas do aluno após criar/editar uma aula.

    O marcador de fim de ciclo é criado só quando o contador fica EXATAMENTE igual
    ao total contratado (não >=) e no máximo uma vez por mês. Não faz commit.
    """
    today = today or date.today()
    contracted = student.contracted_lessons or 0
    completed = student.completed_lessons_in_cycle or 0

    if contracted <= 0:
        return CycleUpdate(False, completed, 0, False)

    if new_status == COMPLETED and previous_status != COMPLETED:
        completed += 1
    elif new_status != COMPLETED and previous_status == COMPLETED:
        completed = max(0, completed - 1)

    student.completed_lessons_in_cycle = completed
    student.end_of_cycle = False

    if await _has_marker_this_month(db, student.id, today):
        return CycleUpdate(True, completed, contracted, False)

    if completed == contracted:
        db.add(Lesson(
            teacher_id=student.teacher_id,
            student_id=student.id,
            date=today,
            subject=student.subject,
            content_covered=f"🎯 FIM DO CICLO DE AULAS - {completed} de {contracted} aulas concluídas",
            status=COMPLETED,
            end_of_cycle=True,
        ))
        student.end_of_cycle = True
        student.completed_lessons_in_cycle = 0
        logger.info("Fim de ciclo do aluno %s (%d aulas)", student.id, contracted)
        return CycleUpdate(True, completed, contracted, True)

    return CycleUpdate(False, completed, contracted, False)
