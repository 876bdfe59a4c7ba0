import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from proclass.core.dependencies import get_db, get_current_user, resolve_teacher_id
from proclass.modules.users.models import User
from .crud import (
    apply_student_update, clean_student_data, delete_student_cascade,
    get_student_or_404, new_student,
)
from .models import Student
from .schemas import StudentOut, StudentCreate, StudentUpdate, StudentImportIn, StudentImportOut

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[StudentOut])
async def list_students(
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    stmt = select(Student).where(Student.teacher_id == me.id)
    if status_filter:
        stmt = stmt.where(Student.status == status_filter)
    res = await db.execute(stmt.order_by(Student.name.asc()))
    return res.scalars().all()


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    st = new_student(me.id, payload.model_dump())
    db.add(st)
    await db.commit()
    await db.refresh(st)
    return st


@router.post("/import", response_model=StudentImportOut)
async def import_students(
    payload: StudentImportIn,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    """
    Importação em lote. Linhas com mesmo nome + telefone de um aluno já
    cadastrado são puladas; `dry_run` só valida e conta.
    """
    if not payload.students:
        raise HTTPException(status_code=400, detail="Nenhum dado encontrado no JSON")
    teacher_id = resolve_teacher_id(me, payload.teacher_id)

    res = await db.execute(select(Student.name, Student.phone).where(Student.teacher_id == teacher_id))
    existing = {(name.lower(), phone) for name, phone in res.all()}

    fresh = []
    for row in payload.students:
        data = clean_student_data(row.model_dump())
        key = ((data.get("name") or "").lower(), data.get("phone"))
        if key in existing:
            continue
        existing.add(key)
        fresh.append(data)

    created_ids: List[int] = []
    if not payload.dry_run and fresh:
        students = [Student(teacher_id=teacher_id, **data) for data in fresh]
        db.add_all(students)
        await db.commit()
        created_ids = [st.id for st in students]
        logger.info("Importação: %d aluno(s) criados para professor %s", len(students), teacher_id)

    return StudentImportOut(
        dry_run=payload.dry_run,
        received=len(payload.students),
        created=len(fresh),
        skipped=len(payload.students) - len(fresh),
        created_ids=created_ids,
    )


@router.get("/{student_id}", response_model=StudentOut)
async def get_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    return await get_student_or_404(db, me.id, student_id)


@router.put("/{student_id}", response_model=StudentOut)
async def update_student(
    student_id: int,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    st = await get_student_or_404(db, me.id, student_id)
    apply_student_update(st, payload.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(st)
    return st


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    st = await get_student_or_404(db, me.id, student_id)
    await delete_student_cascade(db, st)
    await db.commit()
    return Response(status_code=204)
