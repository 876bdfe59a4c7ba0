# proclass/core/logging.py
import logging

from proclass.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    lvl = (level or settings.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(level=getattr(logging, lvl, logging.INFO), format=LOG_FORMAT)
    # o SQL do engine só interessa em debug
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
