from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from proclass.core.dependencies import get_db, get_current_user, get_current_admin
from proclass.core.security import hash_password
from proclass.utils.br import normalize_mobile_phone
from .models import User
from .schemas import UserOut, TeacherCreate, TeacherUpdate

router = APIRouter()


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    q = await db.execute(select(User).where(User.id == user_id))
    u = q.scalar_one_or_none()
    if not u:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return u


async def _ensure_email_free(db: AsyncSession, email: str) -> None:
    exists = await db.execute(select(User).where(User.email == email))
    if exists.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="E-mail já cadastrado")


@router.get("/me", response_model=UserOut)
async def users_me(user: User = Depends(get_current_user)):
    return user


@router.get("", response_model=List[UserOut])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    res = await db.execute(select(User).order_by(User.name.asc()))
    return res.scalars().all()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: TeacherCreate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    email = payload.email.strip().lower()
    await _ensure_email_free(db, email)

    u = User(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        role=payload.role,
        phone=normalize_mobile_phone(payload.phone),
        expires_at=payload.expires_at,
        is_exempt=payload.is_exempt,
        is_active=True,
    )
    db.add(u)
    await db.commit()
    await db.refresh(u)
    return u


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    return await _get_user_or_404(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    payload: TeacherUpdate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    u = await _get_user_or_404(db, user_id)
    data = payload.model_dump(exclude_unset=True)

    if "email" in data and data["email"] is not None:
        email = data.pop("email").strip().lower()
        if email != u.email:
            await _ensure_email_free(db, email)
        u.email = email
    if data.get("password"):
        u.password_hash = hash_password(data.pop("password"))
    data.pop("password", None)
    if "phone" in data:
        data["phone"] = normalize_mobile_phone(data["phone"])

    for k, v in data.items():
        setattr(u, k, v)

    await db.commit()
    await db.refresh(u)
    return u


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    target = await _get_user_or_404(db, user_id)

    if target.id == admin.id:
        raise HTTPException(status_code=400, detail="Você não pode excluir a si mesmo.")
    if target.is_admin:
        raise HTTPException(status_code=403, detail="Não é permitido excluir um admin.")

    await db.delete(target)
    await db.commit()
    return Response(status_code=204)
