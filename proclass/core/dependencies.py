from datetime import date
from typing import AsyncIterator, Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from proclass.db.session import AsyncSessionLocal
from proclass.modules.users.models import User
from proclass.core.config import settings
from proclass.core.security import decode_token, bearer_matches
from proclass.services.reminders.channel import ChannelFactory, twilio_channel_for
from proclass.services.reminders.errors import AuthorizationError
from proclass.services.reminders.ledger import SqlReminderLedger
from proclass.services.reminders.repositories import (
    SqlPaymentRepository, SqlPolicyRepository, SqlStudentRepository,
)
from proclass.services.reminders.scheduler import ReminderScheduler

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not token:
        raise HTTPException(status_code=401, detail="Missing token")
    try:
        payload = decode_token(token, settings.SECRET_KEY)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")

    q = await db.execute(select(User).where(User.id == user_id))
    user = q.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    if user.access_expired(date.today()):
        raise HTTPException(status_code=403, detail="Acesso expirado. Fale com o administrador.")
    return user

async def get_current_admin(
    user: User = Depends(get_current_user),
) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin only")
    return user

def resolve_teacher_id(me: User, teacher_id: Optional[int]) -> int:
    """Professor só age sobre si mesmo; admin pode informar qualquer teacher_id."""
    if teacher_id is None or teacher_id == me.id:
        return me.id
    if not me.is_admin:
        raise HTTPException(status_code=403, detail="Sem permissão para este professor")
    return teacher_id

async def verify_cron_secret(
    authorization: Optional[str] = Header(default=None),
) -> None:
    if not bearer_matches(authorization, settings.CRON_SECRET):
        raise AuthorizationError("invalid_cron_token")

def get_channel_factory() -> ChannelFactory:
    return twilio_channel_for

async def get_reminder_scheduler(
    db: AsyncSession = Depends(get_db),
    channel_factory: ChannelFactory = Depends(get_channel_factory),
) -> ReminderScheduler:
    return ReminderScheduler(
        students=SqlStudentRepository(db),
        payments=SqlPaymentRepository(db),
        policies=SqlPolicyRepository(db),
        ledger=SqlReminderLedger(db),
        channel_factory=channel_factory,
    )
