# proclass/modules/classes/router.py
from __future__ import annotations

import logging
from collections import defaultdict
from typing import List, Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from proclass.core.dependencies import get_db, get_current_user
from proclass.modules.users.models import User
from proclass.modules.students.crud import students_of_teacher
from proclass.modules.students.models import Student
from .models import ClassGroup, ClassStudent
from .schemas import ClassCreate, ClassUpdate, ClassOut, ClassStudentOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Turmas"])


# ---------- helpers ----------
async def _get_class_or_404(db: AsyncSession, teacher_id: int, class_id: int) -> ClassGroup:
    res = await db.execute(
        select(ClassGroup).where(ClassGroup.id == class_id, ClassGroup.teacher_id == teacher_id)
    )
    cg = res.scalar_one_or_none()
    if not cg:
        raise HTTPException(status_code=404, detail="Aula não encontrada")
    return cg


def _check_times(start_time: str, end_time: str) -> None:
    # "HH:MM" compara certo como string
    if end_time <= start_time:
        raise HTTPException(status_code=400, detail="Horário final deve ser depois do inicial")


async def _set_enrollment(db: AsyncSession, cg: ClassGroup, student_ids: Sequence[int]) -> None:
    """Troca a matrícula inteira da turma pelos ids informados."""
    students = await students_of_teacher(db, cg.teacher_id, student_ids)
    await db.execute(delete(ClassStudent).where(ClassStudent.class_id == cg.id))
    db.add_all([ClassStudent(class_id=cg.id, student_id=s.id) for s in students])


async def _to_out(db: AsyncSession, groups: Sequence[ClassGroup]) -> List[ClassOut]:
    ids = [g.id for g in groups]
    roster: dict[int, list[ClassStudentOut]] = defaultdict(list)
    if ids:
        res = await db.execute(
            select(ClassStudent.class_id, Student.id, Student.name)
            .join(Student, Student.id == ClassStudent.student_id)
            .where(ClassStudent.class_id.in_(ids))
            .order_by(Student.name.asc())
        )
        for class_id, sid, name in res.all():
            roster[class_id].append(ClassStudentOut(id=sid, name=name))

    out = []
    for g in groups:
        students = roster.get(g.id, [])
        out.append(ClassOut(
            id=g.id, teacher_id=g.teacher_id, title=g.title, description=g.description,
            day_of_week=g.day_of_week, start_time=g.start_time, end_time=g.end_time,
            price=g.price, active=g.active, students=students, student_count=len(students),
            created_at=g.created_at, updated_at=g.updated_at,
        ))
    return out


# ---------- rotas ----------
@router.get("", response_model=List[ClassOut])
async def list_classes(
    active: Optional[bool] = Query(None),
    day_of_week: Optional[int] = Query(None, ge=0, le=6),
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    stmt = select(ClassGroup).where(ClassGroup.teacher_id == me.id)
    if active is not None:
        stmt = stmt.where(ClassGroup.active == active)
    if day_of_week is not None:
        stmt = stmt.where(ClassGroup.day_of_week == day_of_week)
    stmt = stmt.order_by(ClassGroup.day_of_week.asc(), ClassGroup.start_time.asc())
    res = await db.execute(stmt)
    return await _to_out(db, res.scalars().all())


@router.post("", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    _check_times(payload.start_time, payload.end_time)
    data = payload.model_dump(exclude={"student_ids"})
    data["title"] = data["title"].strip()

    cg = ClassGroup(teacher_id=me.id, **data)
    db.add(cg)
    await db.flush()
    await _set_enrollment(db, cg, payload.student_ids)
    await db.commit()
    await db.refresh(cg)
    logger.info("Turma %s criada (professor %s, %d alunos)", cg.id, me.id, len(set(payload.student_ids)))
    return (await _to_out(db, [cg]))[0]


@router.get("/{class_id}", response_model=ClassOut)
async def get_class(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    cg = await _get_class_or_404(db, me.id, class_id)
    return (await _to_out(db, [cg]))[0]


@router.put("/{class_id}", response_model=ClassOut)
async def update_class(
    class_id: int,
    payload: ClassUpdate,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    cg = await _get_class_or_404(db, me.id, class_id)
    data = payload.model_dump(exclude_unset=True)
    student_ids = data.pop("student_ids", None)
    # colunas NOT NULL: null explícito = não alterar
    data = {k: v for k, v in data.items() if v is not None or k == "description"}
    _check_times(data.get("start_time", cg.start_time), data.get("end_time", cg.end_time))

    for k, v in data.items():
        setattr(cg, k, v)
    if student_ids is not None:
        await _set_enrollment(db, cg, student_ids)
    await db.commit()
    await db.refresh(cg)
    return (await _to_out(db, [cg]))[0]


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_class(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    cg = await _get_class_or_404(db, me.id, class_id)
    await db.execute(delete(ClassStudent).where(ClassStudent.class_id == cg.id))
    await db.delete(cg)
    await db.commit()
    return Response(status_code=204)
