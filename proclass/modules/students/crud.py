# proclass/modules/students/crud.py
"""Acesso a alunos compartilhado pelo router, pela importação e pelas turmas."""
from typing import Any, Iterable, List

from fastapi import HTTPException, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from proclass.modules.classes.models import ClassStudent
from proclass.modules.lessons.models import Lesson
from proclass.modules.payments.models import Payment
from proclass.utils.br import normalize_mobile_phone
from .models import Student

PHONE_FIELDS = ("phone", "guardian_phone")
TEXT_FIELDS = ("name", "guardian_name", "subject", "notes")
# colunas NOT NULL: null explícito no PUT significa "não mexer"
REQUIRED_FIELDS = ("name", "status", "charge_fee")


def clean_student_data(data: dict[str, Any]) -> dict[str, Any]:
    for k in PHONE_FIELDS:
        if k in data:
            data[k] = normalize_mobile_phone(data[k])
    for k in TEXT_FIELDS:
        if isinstance(data.get(k), str):
            data[k] = data[k].strip() or None
    return data


async def get_student_or_404(db: AsyncSession, teacher_id: int, student_id: int) -> Student:
    res = await db.execute(
        select(Student).where(Student.id == student_id, Student.teacher_id == teacher_id)
    )
    student = res.scalar_one_or_none()
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Aluno não encontrado")
    return student


async def students_of_teacher(db: AsyncSession, teacher_id: int, ids: Iterable[int]) -> List[Student]:
    """Carrega os alunos pedidos; qualquer id de outro professor vira 404."""
    wanted = set(ids)
    if not wanted:
        return []
    res = await db.execute(
        select(Student).where(Student.teacher_id == teacher_id, Student.id.in_(wanted))
    )
    found = list(res.scalars().all())
    missing = wanted - {s.id for s in found}
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Aluno(s) não encontrado(s): {sorted(missing)}",
        )
    return found


def new_student(teacher_id: int, data: dict[str, Any]) -> Student:
    return Student(teacher_id=teacher_id, **clean_student_data(data))


def apply_student_update(student: Student, data: dict[str, Any]) -> Student:
    data = clean_student_data(data)
    for k in REQUIRED_FIELDS:
        if k in data and data[k] is None:
            data.pop(k)
    for k, v in data.items():
        setattr(student, k, v)
    return student


async def delete_student_cascade(db: AsyncSession, student: Student) -> None:
    # o SQLite não aplica ondelete sem PRAGMA, então limpa na mão
    await db.execute(delete(Payment).where(Payment.student_id == student.id))
    await db.execute(delete(Lesson).where(Lesson.student_id == student.id))
    await db.execute(delete(ClassStudent).where(ClassStudent.student_id == student.id))
    await db.delete(student)
