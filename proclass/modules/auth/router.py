import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from proclass.core.config import settings
from proclass.core.dependencies import get_db, get_current_user
from proclass.core.security import verify_password, create_access_token
from proclass.modules.users.models import User
from proclass.modules.users.schemas import UserOut
from .schemas import LoginRequest, TokenOut

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=TokenOut)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    email = payload.email.strip().lower()
    q = await db.execute(select(User).where(User.email == email))
    user = q.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Login recusado para %s", email)
        raise HTTPException(status_code=401, detail="Credenciais inválidas")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Usuário inativo")

    token = create_access_token(
        {"sub": str(user.id), "role": user.role},
        expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        secret_key=settings.SECRET_KEY,
    )
    return TokenOut(access_token=token, role=user.role)

@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    return user
