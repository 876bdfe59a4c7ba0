# proclass/services/overdue.py
import logging
from datetime import date
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from proclass.modules.payments.models import Payment

logger = logging.getLogger(__name__)


async def mark_overdue_payments(db: AsyncSession, today: date, teacher_id: Optional[int] = None) -> int:
    """Pendentes com vencimento antes de hoje viram 'overdue'. Retorna quantos mudaram."""
    stmt = (
        update(Payment)
        .where(Payment.status == "pending", Payment.due_date.is_not(None), Payment.due_date < today)
        .values(status="overdue")
    )
    if teacher_id is not None:
        stmt = stmt.where(Payment.teacher_id == teacher_id)
    res = await db.execute(stmt)
    await db.commit()
    n = res.rowcount or 0
    if n:
        logger.info("%d pagamento(s) marcados como atrasados", n)
    return n
