# proclass/modules/cron/router.py
import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from proclass.core.dependencies import get_db, get_reminder_scheduler, verify_cron_secret
from proclass.services.overdue import mark_overdue_payments
from proclass.services.reminders.scheduler import ReminderScheduler
from proclass.modules.whatsapp.schemas import BatchResultOut
from .schemas import CronRunIn, CronRunOut

logger = logging.getLogger(__name__)

# o segredo é checado antes de qualquer acesso a dados
router = APIRouter(dependencies=[Depends(verify_cron_secret)])


@router.post("/payment-reminders", response_model=CronRunOut)
async def payment_reminders(
    body: CronRunIn = Body(default=CronRunIn()),
    db: AsyncSession = Depends(get_db),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
):
    if body.teacher_id is not None:
        results = [await scheduler.run_for_teacher(body.teacher_id)]
    else:
        results = await scheduler.run_all()

    overdue = await mark_overdue_payments(db, date.today())
    logger.info(
        "Cron de lembretes: %d professor(es), %d enviados, %d falhas",
        len(results), sum(r.sent for r in results), sum(r.failed for r in results),
    )
    return CronRunOut(
        results=[BatchResultOut.model_validate(r) for r in results],
        overdue_updated=overdue,
        timestamp=datetime.now(timezone.utc),
    )
