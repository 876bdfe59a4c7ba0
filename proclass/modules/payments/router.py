# proclass/modules/payments/router.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from proclass.core.dependencies import get_db, get_current_user
from proclass.modules.users.models import User
from proclass.modules.students.crud import get_student_or_404
from proclass.services.overdue import mark_overdue_payments
from proclass.utils.br import normalize_reference_month, reference_month as ym_of
from .models import Payment
from .schemas import PaymentCreate, PaymentUpdate, PaymentOut, PaymentListOut, MarkOverdueOut

router = APIRouter(tags=["Pagamentos"])

REQUIRED_FIELDS = ("amount", "status")


async def _get_payment_or_404(db: AsyncSession, teacher_id: int, payment_id: int) -> Payment:
    res = await db.execute(select(Payment).where(Payment.id == payment_id, Payment.teacher_id == teacher_id))
    p = res.scalar_one_or_none()
    if not p:
        raise HTTPException(status_code=404, detail="Pagamento não encontrado")
    return p


@router.get("", response_model=PaymentListOut)
async def list_payments(
    status_filter: str | None = Query(None, alias="status"),
    student_id: int | None = Query(None),
    reference_month: str | None = Query(None, description="YYYY-MM"),
    limit: int = Query(100, le=1000),
    offset: int = 0,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    stmt = select(Payment).where(Payment.teacher_id == me.id)
    if status_filter:
        stmt = stmt.where(Payment.status == status_filter)
    if student_id:
        stmt = stmt.where(Payment.student_id == student_id)
    if reference_month:
        try:
            stmt = stmt.where(Payment.reference_month == normalize_reference_month(reference_month))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
    stmt = stmt.order_by(Payment.due_date.desc(), Payment.id.desc()).limit(limit).offset(offset)
    res = await db.execute(stmt)
    items = [PaymentOut.model_validate(obj) for obj in res.scalars().all()]
    return PaymentListOut(items=items, total=int(total or 0))


@router.post("", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    # aluno precisa ser do professor
    await get_student_or_404(db, me.id, payload.student_id)

    data = payload.model_dump()
    # sem competência explícita, usa o mês do vencimento
    if not data.get("reference_month") and data.get("due_date"):
        data["reference_month"] = ym_of(data["due_date"])
    if isinstance(data.get("notes"), str):
        data["notes"] = data["notes"].strip() or None

    p = Payment(teacher_id=me.id, **data)
    db.add(p)
    await db.commit()
    await db.refresh(p)
    return p


@router.post("/mark-overdue", response_model=MarkOverdueOut)
async def mark_overdue(
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    n = await mark_overdue_payments(db, date.today(), teacher_id=me.id)
    return MarkOverdueOut(updated=n)


@router.put("/{payment_id}", response_model=PaymentOut)
async def update_payment(
    payment_id: int,
    payload: PaymentUpdate,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    p = await _get_payment_or_404(db, me.id, payment_id)
    data = payload.model_dump(exclude_unset=True)
    # null explícito em coluna NOT NULL = não alterar
    for k in REQUIRED_FIELDS:
        if k in data and data[k] is None:
            data.pop(k)
    # vencimento mudou sem competência explícita => competência acompanha
    if data.get("due_date") and not data.get("reference_month"):
        data["reference_month"] = ym_of(data["due_date"])
    # marcar como pago sem data => hoje
    if data.get("status") == "paid" and not data.get("payment_date") and not p.payment_date:
        data["payment_date"] = date.today()
    for k, v in data.items():
        setattr(p, k, v)
    await db.commit()
    await db.refresh(p)
    return p


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    me: User = Depends(get_current_user),
):
    p = await _get_payment_or_404(db, me.id, payment_id)
    await db.delete(p)
    await db.commit()
    return Response(status_code=204)
