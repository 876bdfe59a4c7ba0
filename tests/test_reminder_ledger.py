from decimal import Decimal

import pytest
from sqlalchemy import select, func

from proclass.modules.whatsapp.models import ReminderLog
from proclass.services.reminders.errors import ConflictError
from proclass.services.reminders.ledger import SqlReminderLedger
from proclass.services.reminders.records import ReminderLogEntry


def entry(teacher_id, student_id, month="2024-05", status="sent"):
    return ReminderLogEntry(
        teacher_id=teacher_id, student_id=student_id, reference_month=month,
        delivery_status=status, channel_message_id="SM1",
        amount_at_send=Decimal("150.00"), due_day_at_send=10,
    )


async def test_record_then_has_been_sent(db, teacher):
    ledger = SqlReminderLedger(db)
    assert not await ledger.has_been_sent(teacher.id, 1, "2024-05")

    await ledger.record(entry(teacher.id, 1))

    assert await ledger.has_been_sent(teacher.id, 1, "2024-05")
    assert not await ledger.has_been_sent(teacher.id, 1, "2024-06")
    assert not await ledger.has_been_sent(teacher.id, 2, "2024-05")


async def test_failed_entry_also_counts(db, teacher):
    ledger = SqlReminderLedger(db)
    await ledger.record(entry(teacher.id, 1, status="failed"))
    assert await ledger.has_been_sent(teacher.id, 1, "2024-05")


async def test_second_record_for_same_triple_conflicts(db, teacher):
    ledger = SqlReminderLedger(db)
    await ledger.record(entry(teacher.id, 1))
    with pytest.raises(ConflictError):
        await ledger.record(entry(teacher.id, 1, status="failed"))

    n = await db.scalar(select(func.count()).select_from(ReminderLog))
    assert n == 1


async def test_list_for_teacher_filters_month(db, teacher, other_teacher):
    ledger = SqlReminderLedger(db)
    await ledger.record(entry(teacher.id, 1, "2024-04"))
    await ledger.record(entry(teacher.id, 1, "2024-05"))
    await ledger.record(entry(other_teacher.id, 1, "2024-05"))

    assert len(await ledger.list_for_teacher(teacher.id)) == 2
    may = await ledger.list_for_teacher(teacher.id, "2024-05")
    assert [(e.student_id, e.reference_month) for e in may] == [(1, "2024-05")]
    assert may[0].amount_at_send == Decimal("150.00")


class BlindLedger(SqlReminderLedger):
    """Não enxerga linhas já gravadas: simula outra execução gravando entre a checagem e o insert."""

    async def _find(self, teacher_id, student_id, reference_month):
        return None


async def test_unique_constraint_becomes_conflict(db, teacher):
    await SqlReminderLedger(db).record(entry(teacher.id, 1))

    ledger = BlindLedger(db)
    with pytest.raises(ConflictError) as exc:
        await ledger.record(entry(teacher.id, 1, status="failed"))
    assert exc.value.code == "reminder_already_logged"

    # sessão continua usável depois do rollback
    n = await db.scalar(select(func.count()).select_from(ReminderLog))
    assert n == 1
    await ledger.record(entry(teacher.id, 1, "2024-06"))
    n = await db.scalar(select(func.count()).select_from(ReminderLog))
    assert n == 2
