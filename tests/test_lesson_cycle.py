from datetime import date

from sqlalchemy import select

from proclass.modules.lessons.models import Lesson
from proclass.services.lesson_cycle import apply_status_change

BASE = "/api/v1/lessons"
TODAY = date(2024, 5, 20)


async def _markers(db, student_id):
    res = await db.execute(select(Lesson).where(Lesson.student_id == student_id, Lesson.end_of_cycle.is_(True)))
    return res.scalars().all()


async def test_marker_on_exact_equality(db, teacher, make_student):
    st = await make_student(teacher.id, contracted_lessons=2, completed_lessons_in_cycle=1, subject="Matemática")

    update = await apply_status_change(db, st, "completed", "scheduled", today=TODAY)
    await db.commit()

    assert update.cycle_completed and update.marker_created
    assert update.completed_lessons == 2
    assert st.completed_lessons_in_cycle == 0
    assert st.end_of_cycle is True
    markers = await _markers(db, st.id)
    assert len(markers) == 1
    assert markers[0].date == TODAY
    assert "2 de 2" in markers[0].content_covered


async def test_no_second_marker_in_same_month(db, teacher, make_student):
    st = await make_student(teacher.id, contracted_lessons=1)

    first = await apply_status_change(db, st, "completed", None, today=TODAY)
    await db.commit()
    second = await apply_status_change(db, st, "completed", None, today=date(2024, 5, 28))
    await db.commit()

    assert first.marker_created
    assert second.cycle_completed and not second.marker_created
    assert len(await _markers(db, st.id)) == 1


async def test_counter_moves_both_ways(db, teacher, make_student):
    st = await make_student(teacher.id, contracted_lessons=8, completed_lessons_in_cycle=3)

    up = await apply_status_change(db, st, "completed", "scheduled", today=TODAY)
    assert up.completed_lessons == 4
    down = await apply_status_change(db, st, "cancelled", "completed", today=TODAY)
    assert down.completed_lessons == 3
    same = await apply_status_change(db, st, "missed", "scheduled", today=TODAY)
    assert same.completed_lessons == 3 and not same.cycle_completed


async def test_without_contract_is_noop(db, teacher, make_student):
    st = await make_student(teacher.id, contracted_lessons=None)
    update = await apply_status_change(db, st, "completed", None, today=TODAY)
    assert not update.cycle_completed
    assert st.completed_lessons_in_cycle == 0


async def test_lesson_endpoints_drive_cycle(client, auth_headers, teacher, make_student):
    st = await make_student(teacher.id, contracted_lessons=1, subject="Física")
    h = auth_headers(teacher)

    r = await client.post(BASE, headers=h, json={"date": "2024-05-02", "student_id": st.id})
    assert r.status_code == 201
    lesson = r.json()["lesson"]
    assert lesson["subject"] == "Física"
    assert r.json()["cycle"]["completed_lessons"] == 0

    r = await client.put(f"{BASE}/{lesson['id']}", headers=h, json={"status": "completed"})
    assert r.status_code == 200
    assert r.json()["cycle"]["marker_created"] is True

    r = await client.get(BASE, params={"student_id": st.id}, headers=h)
    assert len(r.json()) == 2
    assert sum(1 for item in r.json() if item["end_of_cycle"]) == 1
