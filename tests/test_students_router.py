from datetime import date

from sqlalchemy import select

from proclass.modules.classes.models import ClassStudent
from proclass.modules.payments.models import Payment

BASE = "/api/v1/students"


async def test_create_normalizes_phones(client, auth_headers, teacher):
    r = await client.post(BASE, headers=auth_headers(teacher), json={
        "name": " Ana ", "phone": "(11) 98888-7777", "guardian_phone": "11 3333-4444",
        "monthly_fee": "150.00", "payment_day": 10,
    })
    assert r.status_code == 201
    body = r.json()
    assert body["name"] == "Ana"
    assert body["phone"] == "11988887777"
    assert body["guardian_phone"] == "1133334444"
    assert body["monthly_fee"] == 150.0
    assert body["teacher_id"] == teacher.id


async def test_list_filters_status_and_owner(client, auth_headers, teacher, other_teacher, make_student):
    await make_student(teacher.id, name="Ativo")
    await make_student(teacher.id, name="Parado", status="inactive")
    await make_student(other_teacher.id, name="De outro")

    r = await client.get(BASE, headers=auth_headers(teacher))
    assert [s["name"] for s in r.json()] == ["Ativo", "Parado"]

    r = await client.get(BASE, params={"status": "inactive"}, headers=auth_headers(teacher))
    assert [s["name"] for s in r.json()] == ["Parado"]


async def test_other_teacher_student_is_404(client, auth_headers, teacher, other_teacher, make_student):
    st = await make_student(other_teacher.id)
    r = await client.get(f"{BASE}/{st.id}", headers=auth_headers(teacher))
    assert r.status_code == 404


async def test_update_keeps_unset_fields(client, auth_headers, teacher, make_student):
    st = await make_student(teacher.id, name="Ana", payment_day=10)
    r = await client.put(f"{BASE}/{st.id}", headers=auth_headers(teacher), json={"payment_day": 15})
    assert r.status_code == 200
    assert r.json()["payment_day"] == 15
    assert r.json()["name"] == "Ana"


async def test_delete_removes_payments(client, session_factory, auth_headers, teacher, make_student, make_payment):
    st = await make_student(teacher.id)
    await make_payment(teacher.id, st.id, due_date=date(2024, 5, 10))

    r = await client.delete(f"{BASE}/{st.id}", headers=auth_headers(teacher))
    assert r.status_code == 204

    async with session_factory() as s:
        res = await s.execute(select(Payment).where(Payment.student_id == st.id))
        assert res.scalars().all() == []


async def test_update_null_status_is_ignored(client, auth_headers, teacher, make_student):
    st = await make_student(teacher.id, status="trial")
    r = await client.put(f"{BASE}/{st.id}", headers=auth_headers(teacher), json={"status": None, "subject": "Física"})
    assert r.status_code == 200
    assert r.json()["status"] == "trial"
    assert r.json()["subject"] == "Física"


async def test_update_null_charge_fee_is_ignored(client, auth_headers, teacher, make_student):
    st = await make_student(teacher.id, charge_fee=False)
    r = await client.put(f"{BASE}/{st.id}", headers=auth_headers(teacher), json={"charge_fee": None})
    assert r.status_code == 200
    assert r.json()["charge_fee"] is False


async def test_delete_removes_class_enrollment(client, session_factory, auth_headers, teacher, make_student):
    st = await make_student(teacher.id)
    h = auth_headers(teacher)
    r = await client.post("/api/v1/classes", headers=h, json={
        "title": "Turma A", "day_of_week": 2, "start_time": "19:00", "end_time": "20:00",
        "student_ids": [st.id],
    })
    class_id = r.json()["id"]

    r = await client.delete(f"{BASE}/{st.id}", headers=h)
    assert r.status_code == 204

    async with session_factory() as s:
        res = await s.execute(select(ClassStudent).where(ClassStudent.student_id == st.id))
        assert res.scalars().all() == []
    r = await client.get(f"/api/v1/classes/{class_id}", headers=h)
    assert r.json()["student_count"] == 0


async def test_import_creates_and_skips_duplicates(client, auth_headers, teacher, make_student):
    await make_student(teacher.id, name="Ana", phone="11988887777")
    r = await client.post(f"{BASE}/import", headers=auth_headers(teacher), json={"alunos": [
        {"name": "ana", "phone": "(11) 98888-7777"},
        {"name": "Beto", "phone": "11977776666", "monthly_fee": 200},
        {"name": "Beto", "phone": "11 97777-6666"},
    ]})
    assert r.status_code == 200
    body = r.json()
    assert (body["received"], body["created"], body["skipped"]) == (3, 1, 2)
    assert len(body["created_ids"]) == 1

    r = await client.get(BASE, headers=auth_headers(teacher))
    assert [s["name"] for s in r.json()] == ["Ana", "Beto"]


async def test_import_dry_run_writes_nothing(client, auth_headers, teacher):
    r = await client.post(f"{BASE}/import", headers=auth_headers(teacher), json={
        "students": [{"name": "Ana"}, {"name": "Beto"}], "dry_run": True,
    })
    body = r.json()
    assert body["dry_run"] is True
    assert body["created"] == 2
    assert body["created_ids"] == []

    r = await client.get(BASE, headers=auth_headers(teacher))
    assert r.json() == []


async def test_import_empty_is_400(client, auth_headers, teacher):
    r = await client.post(f"{BASE}/import", headers=auth_headers(teacher), json={"students": []})
    assert r.status_code == 400


async def test_import_for_other_teacher_needs_admin(client, auth_headers, teacher, other_teacher, admin):
    payload = {"teacher_id": other_teacher.id, "students": [{"name": "Ana"}]}
    r = await client.post(f"{BASE}/import", headers=auth_headers(teacher), json=payload)
    assert r.status_code == 403

    r = await client.post(f"{BASE}/import", headers=auth_headers(admin), json=payload)
    assert r.json()["created"] == 1
    r = await client.get(BASE, headers=auth_headers(other_teacher))
    assert [s["name"] for s in r.json()] == ["Ana"]
