import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from proclass.main import app
from proclass.core.config import settings
from proclass.core.dependencies import get_db, get_channel_factory
from proclass.core.security import create_access_token, hash_password
from proclass.db.base import Base
from proclass.modules.users.models import User, ROLE_ADMIN, ROLE_TEACHER
from proclass.modules.students.models import Student
from proclass.modules.payments.models import Payment
from proclass.modules.whatsapp.models import WhatsAppConfig
from proclass.services.reminders.errors import ChannelSendError, ConfigurationError
from proclass.services.reminders.records import SendResult


class FakeChannel:
    """Canal em memória: guarda (to, body) e falha para os números pedidos."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()
        self.raise_for = set()

    async def send(self, to, body):
        if to in self.raise_for:
            raise ChannelSendError("network_error", "timeout")
        self.sent.append((to, body))
        if to in self.fail_for:
            return SendResult(success=False, status="undelivered", error="status undelivered")
        return SendResult(success=True, message_id=f"SM{len(self.sent):04d}", status="queued")


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def channel_factory(channel):
    def factory(policy):
        if not policy.has_credentials:
            raise ConfigurationError("missing_credentials", {"teacher_id": policy.teacher_id})
        return channel
    return factory


@pytest.fixture
async def client(session_factory, channel_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_channel_factory] = lambda: channel_factory
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def cron_secret(monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "cron-secret")
    return "cron-secret"


async def _make_user(db, **kw) -> User:
    u = User(**kw)
    db.add(u)
    await db.commit()
    await db.refresh(u)
    return u


@pytest.fixture
async def teacher(db):
    return await _make_user(
        db, name="Ana Souza", email="ana@example.com",
        password_hash=hash_password("segredo123"), role=ROLE_TEACHER, is_active=True,
    )


@pytest.fixture
async def other_teacher(db):
    return await _make_user(
        db, name="Bruno Lima", email="bruno@example.com",
        password_hash=hash_password("segredo123"), role=ROLE_TEACHER, is_active=True,
    )


@pytest.fixture
async def admin(db):
    return await _make_user(
        db, name="Admin", email="admin@example.com",
        password_hash=hash_password("admin123"), role=ROLE_ADMIN, is_active=True,
    )


def auth_for(user: User) -> dict:
    token = create_access_token(
        {"sub": str(user.id), "role": user.role}, secret_key=settings.SECRET_KEY,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return auth_for


@pytest.fixture
def make_student(db):
    async def _make(teacher_id: int, **kw) -> Student:
        data = dict(
            name="João Silva", phone="11987654321", status="active",
            monthly_fee=Decimal("150.00"), payment_day=10, charge_fee=True,
        )
        data.update(kw)
        st = Student(teacher_id=teacher_id, **data)
        db.add(st)
        await db.commit()
        await db.refresh(st)
        return st
    return _make


@pytest.fixture
def make_payment(db):
    async def _make(teacher_id: int, student_id: int, **kw) -> Payment:
        data = dict(amount=Decimal("150.00"), status="pending", reference_month="2024-05")
        data.update(kw)
        p = Payment(teacher_id=teacher_id, student_id=student_id, **data)
        db.add(p)
        await db.commit()
        await db.refresh(p)
        return p
    return _make


@pytest.fixture
def make_config(db):
    async def _make(teacher_id: int, **kw) -> WhatsAppConfig:
        data = dict(
            account_sid="AC0123456789", auth_token="super-secret-token",
            phone_number="+14155238886", reminder_days=3,
            enabled=True, auto_send_enabled=True,
        )
        data.update(kw)
        cfg = WhatsAppConfig(teacher_id=teacher_id, **data)
        db.add(cfg)
        await db.commit()
        await db.refresh(cfg)
        return cfg
    return _make
