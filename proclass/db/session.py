# proclass/db/session.py
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from proclass.core.config import settings


def _database_url() -> str:
    if settings.DATABASE_URL:
        url = settings.DATABASE_URL
        # Railway/Render entregam "postgres://"; o SQLAlchemy quer o driver explícito
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+psycopg://", 1)
        return url
    data_dir = Path(__file__).resolve().parents[2] / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    db_file = data_dir / "proclass.db"
    # usar caminho POSIX para o SQLAlchemy
    return f"sqlite+aiosqlite:///{db_file.as_posix()}"


engine = create_async_engine(_database_url(), echo=False, future=True, pool_pre_ping=True)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
