from datetime import date, timedelta

BASE = "/api/v1"


async def test_login_and_me(client, teacher):
    r = await client.post(f"{BASE}/auth/login", json={"email": "ANA@example.com", "password": "segredo123"})
    assert r.status_code == 200
    token = r.json()["access_token"]
    assert r.json()["role"] == "teacher"

    r = await client.get(f"{BASE}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["email"] == "ana@example.com"


async def test_login_wrong_password(client, teacher):
    r = await client.post(f"{BASE}/auth/login", json={"email": "ana@example.com", "password": "errada"})
    assert r.status_code == 401


async def test_invalid_token(client):
    r = await client.get(f"{BASE}/auth/me", headers={"Authorization": "Bearer nao-e-jwt"})
    assert r.status_code == 401


async def test_expired_teacher_is_blocked(client, db, auth_headers, teacher):
    teacher.expires_at = date.today() - timedelta(days=1)
    await db.commit()
    r = await client.get(f"{BASE}/students", headers=auth_headers(teacher))
    assert r.status_code == 403


async def test_exempt_teacher_ignores_expiry(client, db, auth_headers, teacher):
    teacher.expires_at = date.today() - timedelta(days=1)
    teacher.is_exempt = True
    await db.commit()
    r = await client.get(f"{BASE}/students", headers=auth_headers(teacher))
    assert r.status_code == 200


async def test_admin_manages_teachers(client, auth_headers, admin, teacher):
    h = auth_headers(admin)
    r = await client.post(f"{BASE}/users", headers=h, json={
        "name": "Nova", "email": "nova@example.com", "password": "123456",
    })
    assert r.status_code == 201
    new_id = r.json()["id"]

    r = await client.post(f"{BASE}/users", headers=h, json={
        "name": "Dup", "email": "nova@example.com", "password": "123456",
    })
    assert r.status_code == 409

    r = await client.patch(f"{BASE}/users/{new_id}", headers=h, json={"is_active": False})
    assert r.json()["is_active"] is False

    r = await client.delete(f"{BASE}/users/{admin.id}", headers=h)
    assert r.status_code == 400

    r = await client.delete(f"{BASE}/users/{new_id}", headers=h)
    assert r.status_code == 204


async def test_teacher_cannot_list_users(client, auth_headers, teacher):
    r = await client.get(f"{BASE}/users", headers=auth_headers(teacher))
    assert r.status_code == 403
