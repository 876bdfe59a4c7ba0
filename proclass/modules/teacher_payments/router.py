# proclass/modules/teacher_payments/router.py
from __future__ import annotations

from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from proclass.core.dependencies import get_db, get_current_admin
from proclass.modules.users.models import User
from proclass.utils.br import reference_month as ym_of
from .models import TeacherPayment
from .schemas import TeacherPaymentCreate, TeacherPaymentUpdate, TeacherPaymentOut

router = APIRouter(tags=["Pagamentos de professores"])

REQUIRED_FIELDS = ("teacher_name", "amount", "status")


async def _get_or_404(db: AsyncSession, payment_id: int) -> TeacherPayment:
    res = await db.execute(select(TeacherPayment).where(TeacherPayment.id == payment_id))
    tp = res.scalar_one_or_none()
    if not tp:
        raise HTTPException(status_code=404, detail="Pagamento de professor não encontrado")
    return tp


async def _fill_teacher(db: AsyncSession, data: dict[str, Any]) -> None:
    """Confere o professor informado e usa o nome dele quando teacher_name não vem."""
    if isinstance(data.get("teacher_name"), str):
        data["teacher_name"] = data["teacher_name"].strip() or None
    teacher_id = data.get("teacher_id")
    if teacher_id is None:
        return
    res = await db.execute(select(User).where(User.id == teacher_id))
    teacher = res.scalar_one_or_none()
    if not teacher:
        raise HTTPException(status_code=404, detail="Professor não encontrado")
    if not data.get("teacher_name"):
        data["teacher_name"] = teacher.name


@router.get("", response_model=List[TeacherPaymentOut])
async def list_teacher_payments(
    teacher_id: Optional[int] = Query(None),
    reference_month: Optional[str] = Query(None, description="YYYY-MM"),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    stmt = select(TeacherPayment)
    if teacher_id is not None:
        stmt = stmt.where(TeacherPayment.teacher_id == teacher_id)
    if reference_month:
        stmt = stmt.where(TeacherPayment.reference_month == reference_month)
    stmt = stmt.order_by(TeacherPayment.created_at.desc(), TeacherPayment.id.desc())
    res = await db.execute(stmt)
    return res.scalars().all()


@router.post("", response_model=TeacherPaymentOut, status_code=status.HTTP_201_CREATED)
async def create_teacher_payment(
    payload: TeacherPaymentCreate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    data = payload.model_dump()
    await _fill_teacher(db, data)
    if not data.get("teacher_name"):
        raise HTTPException(status_code=400, detail="Informe teacher_id ou teacher_name")
    if not data.get("reference_month") and data.get("due_date"):
        data["reference_month"] = ym_of(data["due_date"])
    if data["status"] == "paid" and not data.get("payment_date"):
        data["payment_date"] = date.today()

    tp = TeacherPayment(**data)
    db.add(tp)
    await db.commit()
    await db.refresh(tp)
    return tp


@router.put("/{payment_id}", response_model=TeacherPaymentOut)
async def update_teacher_payment(
    payment_id: int,
    payload: TeacherPaymentUpdate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    tp = await _get_or_404(db, payment_id)
    data = payload.model_dump(exclude_unset=True)
    await _fill_teacher(db, data)
    for k in REQUIRED_FIELDS:
        if k in data and data[k] is None:
            data.pop(k)
    if data.get("due_date") and not data.get("reference_month"):
        data["reference_month"] = ym_of(data["due_date"])
    if data.get("status") == "paid" and not data.get("payment_date") and not tp.payment_date:
        data["payment_date"] = date.today()

    for k, v in data.items():
        setattr(tp, k, v)
    await db.commit()
    await db.refresh(tp)
    return tp


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_teacher_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    tp = await _get_or_404(db, payment_id)
    await db.delete(tp)
    await db.commit()
    return Response(status_code=204)
