from datetime import date

import pytest
from sqlalchemy import select, func

import proclass.services.reminders.scheduler as scheduler_module
from proclass.modules.payments.models import Payment
from proclass.modules.whatsapp.models import ReminderLog

URL = "/api/v1/cron/payment-reminders"


@pytest.fixture(autouse=True)
def fixed_today(monkeypatch):
    monkeypatch.setattr(scheduler_module, "local_today", lambda tz, fallback=None: date(2024, 5, 7))


async def test_wrong_secret_is_rejected(client, session_factory, cron_secret, teacher, make_student, make_config):
    await make_config(teacher.id)
    await make_student(teacher.id)

    r = await client.post(URL, json={}, headers={"Authorization": "Bearer errado"})
    assert r.status_code == 401

    r = await client.post(URL, json={})
    assert r.status_code == 401

    async with session_factory() as s:
        assert await s.scalar(select(func.count()).select_from(ReminderLog)) == 0


async def test_runs_all_auto_send_teachers(client, channel, cron_secret, teacher, other_teacher,
                                           make_student, make_config):
    await make_config(teacher.id)
    await make_config(other_teacher.id, auto_send_enabled=False)
    await make_student(teacher.id)
    await make_student(other_teacher.id)

    r = await client.post(URL, headers={"Authorization": f"Bearer {cron_secret}"})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert [res["teacher_id"] for res in body["results"]] == [teacher.id]
    assert body["results"][0]["sent"] == 1
    assert len(channel.sent) == 1


async def test_single_teacher_and_overdue_marking(client, session_factory, cron_secret, teacher,
                                                  make_student, make_payment, make_config):
    await make_config(teacher.id)
    st = await make_student(teacher.id)
    old = await make_payment(teacher.id, st.id, status="pending",
                             reference_month="2020-01", due_date=date(2020, 1, 10))

    r = await client.post(URL, json={"teacher_id": teacher.id},
                          headers={"Authorization": f"Bearer {cron_secret}"})

    assert r.status_code == 200
    body = r.json()
    assert body["overdue_updated"] == 1
    assert body["results"][0]["reference_month"] == "2024-05"

    async with session_factory() as s:
        p = await s.get(Payment, old.id)
        assert p.status == "overdue"


async def test_teacher_without_config_is_noop(client, cron_secret, teacher):
    r = await client.post(URL, json={"teacher_id": teacher.id},
                          headers={"Authorization": f"Bearer {cron_secret}"})
    assert r.status_code == 200
    res = r.json()["results"][0]
    assert res["processed"] == 0
    assert "not_found" in res["message"]
