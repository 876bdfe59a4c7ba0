# proclass/main.py
import sys
import asyncio

# Event loop compatível no Windows (safe em outros SOs também)
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from contextlib import asynccontextmanager
import json
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from proclass.core.config import settings
from proclass.core.logging import configure_logging
from proclass.api.v1.router import api_router
from proclass.db.session import engine
from proclass.db.base import Base
from proclass.services.reminders.errors import AuthorizationError, ConflictError

# registra todas as tabelas no metadata
from proclass.modules.users import models as _users_models  # noqa: F401
from proclass.modules.students import models as _students_models  # noqa: F401
from proclass.modules.payments import models as _payments_models  # noqa: F401
from proclass.modules.lessons import models as _lessons_models  # noqa: F401
from proclass.modules.whatsapp import models as _whatsapp_models  # noqa: F401
from proclass.modules.classes import models as _classes_models  # noqa: F401
from proclass.modules.teacher_payments import models as _teacher_payments_models  # noqa: F401

configure_logging()
logger = logging.getLogger("proclass")


def _normalize_origins(value) -> list[str]:
    """Aceita lista, JSON string ou CSV e devolve lista de origens."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(o).strip() for o in value if str(o).strip()]
    if isinstance(value, str):
        try:
            as_json = json.loads(value)
            if isinstance(as_json, (list, tuple)):
                return [str(o).strip() for o in as_json if str(o).strip()]
        except ValueError:
            pass
        return [o.strip() for o in value.split(",") if o.strip()]
    return [str(value).strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Em desenvolvimento, cria as tabelas que faltarem (SQLite ou Postgres)."""
    env = (settings.ENVIRONMENT or "").lower().strip()
    if env == "dev":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Tabelas verificadas (ENVIRONMENT=dev)")
    yield
    await engine.dispose()


# --- App ---
app = FastAPI(title="ProClass Backend", lifespan=lifespan)

# --- CORS (colocado ANTES dos routers) ---
origins = _normalize_origins(getattr(settings, "CORS_ORIGINS", None))
if not origins:
    origins = [
        "http://localhost:8080",
        "http://localhost:5173",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    logger.warning("Acesso negado em %s (%s)", request.url.path, exc.code)
    return JSONResponse(status_code=401, content={"detail": "Unauthorized"})


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": "Registro já existe", "code": exc.code})


# Healthcheck simples
@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


# --- API v1 (só depois do CORS) ---
app.include_router(api_router, prefix=settings.API_V1_PREFIX)
