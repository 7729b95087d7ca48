from datetime import datetime, timezone

from classroom.core.security import verify_password
from classroom.models.user import User


def test_register_and_read_profile(client, auth, db):
    r = client.post(
        "/users/register",
        json={
            "email": "new.teacher@example.com",
            "password": "s3cret-pass",
            "full_name": "New Teacher",
            "role": "teacher",
        },
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["role"] == "teacher"
    assert "hashed_password" not in body

    user = db.query(User).filter(User.email == "new.teacher@example.com").one()
    assert verify_password("s3cret-pass", user.hashed_password)

    r = client.get("/users/me", headers=auth(body["id"]))
    assert r.status_code == 200
    assert r.json()["email"] == "new.teacher@example.com"


def test_register_duplicate_email(client):
    r = client.post(
        "/users/register",
        json={"email": "student.a@example.com", "password": "password123", "role": "student"},
    )
    assert r.status_code == 400


def test_register_cannot_pick_admin_role(client):
    r = client.post(
        "/users/register",
        json={"email": "root@example.com", "password": "password123", "role": "admin"},
    )
    assert r.status_code == 422


def test_update_profile(client, auth, seed, db):
    r = client.patch(
        "/users/me",
        headers=auth(seed.student_a_id),
        json={"full_name": "Alice A.", "password": "another-pass"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["full_name"] == "Alice A."

    user = db.get(User, seed.student_a_id)
    assert verify_password("another-pass", user.hashed_password)


def test_invalid_token(client):
    r = client.get("/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


def test_admin_lists_teachers_with_their_classrooms(client, auth, seed):
    r = client.get("/users/teachers", headers=auth(seed.admin_id))
    assert r.status_code == 200, r.text
    rows = {t["id"]: t for t in r.json()}
    assert set(rows) == {seed.teacher_id, seed.other_teacher_id}
    assert rows[seed.teacher_id]["classroom_ids"] == [seed.classroom_id]
    assert rows[seed.other_teacher_id]["classroom_ids"] == []
    assert all(t["role"] == "teacher" for t in r.json())


def test_only_admins_list_teachers(client, auth, seed):
    assert client.get("/users/teachers", headers=auth(seed.teacher_id)).status_code == 403
    assert client.get("/users/teachers", headers=auth(seed.student_a_id)).status_code == 403


def test_teacher_views_student_details(client, auth, seed, clock):
    clock.now = datetime(2024, 1, 11, 8, 0, tzinfo=timezone.utc)
    r = client.get(f"/users/students/{seed.student_a_id}", headers=auth(seed.teacher_id))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["email"] == "student.a@example.com"
    assert body["classroom_ids"] == [seed.classroom_id]
    assert [a["id"] for a in body["assignments"]] == [seed.assignment_id]
    assert body["assignments"][0]["status"] == "late"
    assert body["assignments"][0]["past_due"] is True


def test_student_details_access(client, auth, seed):
    url = f"/users/students/{seed.student_a_id}"

    # not one of this teacher's students
    assert client.get(url, headers=auth(seed.other_teacher_id)).status_code == 403
    # students use /users/me instead
    assert client.get(url, headers=auth(seed.student_a_id)).status_code == 403

    r = client.get(url, headers=auth(seed.admin_id))
    assert r.status_code == 200, r.text
    assert r.json()["assignments"][0]["status"] == "pending"

    r = client.get(f"/users/students/{seed.teacher_id}", headers=auth(seed.admin_id))
    assert r.status_code == 404
