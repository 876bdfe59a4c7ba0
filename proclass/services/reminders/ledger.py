# proclass/services/reminders/ledger.py
from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from proclass.modules.whatsapp.models import ReminderLog
from .errors import ConflictError
from .records import ReminderLogEntry

logger = logging.getLogger(__name__)


class ReminderLedger(Protocol):
    async def has_been_sent(self, teacher_id: int, student_id: int, reference_month: str) -> bool: ...

    async def record(self, entry: ReminderLogEntry) -> None: ...


def _entry_from_row(row: ReminderLog) -> ReminderLogEntry:
    return ReminderLogEntry(
        teacher_id=row.teacher_id,
        student_id=row.student_id,
        reference_month=row.reference_month,
        delivery_status=row.delivery_status,
        channel_message_id=row.channel_message_id,
        error_detail=row.error_detail,
        amount_at_send=row.amount_at_send,
        due_day_at_send=row.due_day_at_send,
        sent_at=row.sent_at,
    )


class SqlReminderLedger:
    """
    Ledger append-only em `reminder_logs`.

    `has_been_sent` + `record` não são atômicos: duas execuções simultâneas para o
    mesmo professor podem enviar duas vezes. A UniqueConstraint da tabela só impede
    a segunda linha, que sobe como ConflictError.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, teacher_id: int, student_id: int, reference_month: str) -> Optional[ReminderLog]:
        res = await self.db.execute(
            select(ReminderLog).where(
                ReminderLog.teacher_id == teacher_id,
                ReminderLog.student_id == student_id,
                ReminderLog.reference_month == reference_month,
            )
        )
        return res.scalar_one_or_none()

    async def has_been_sent(self, teacher_id: int, student_id: int, reference_month: str) -> bool:
        # qualquer registro conta, inclusive "failed"
        return await self._find(teacher_id, student_id, reference_month) is not None

    async def record(self, entry: ReminderLogEntry) -> None:
        key = {"teacher_id": entry.teacher_id, "student_id": entry.student_id,
               "reference_month": entry.reference_month}
        if await self._find(entry.teacher_id, entry.student_id, entry.reference_month):
            raise ConflictError("reminder_already_logged", key)

        row = ReminderLog(
            teacher_id=entry.teacher_id,
            student_id=entry.student_id,
            reference_month=entry.reference_month,
            delivery_status=entry.delivery_status,
            channel_message_id=entry.channel_message_id,
            error_detail=entry.error_detail,
            amount_at_send=entry.amount_at_send,
            due_day_at_send=entry.due_day_at_send,
        )
        if entry.sent_at is not None:
            row.sent_at = entry.sent_at
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("Ledger: registro concorrente para %s", key)
            raise ConflictError("reminder_already_logged", key) from e

    async def list_for_teacher(
        self, teacher_id: int, reference_month: Optional[str] = None
    ) -> Sequence[ReminderLogEntry]:
        stmt = select(ReminderLog).where(ReminderLog.teacher_id == teacher_id)
        if reference_month:
            stmt = stmt.where(ReminderLog.reference_month == reference_month)
        stmt = stmt.order_by(ReminderLog.sent_at.desc(), ReminderLog.id.desc())
        res = await self.db.execute(stmt)
        return [_entry_from_row(r) for r in res.scalars().all()]
