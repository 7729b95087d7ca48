from datetime import timedelta


def post_announcement(client, auth, seed, **overrides):
    payload = {"title": "Quiz on Friday", "content": "Chapters 1 to 3.", "priority": "high"}
    payload.update(overrides)
    return client.post(
        f"/classrooms/{seed.classroom_id}/announcements",
        headers=auth(seed.teacher_id),
        json=payload,
    )


def test_teacher_posts_and_students_read(client, auth, seed):
    r = post_announcement(client, auth, seed)
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["status"] == "active"
    assert created["priority"] == "high"
    assert created["author_id"] == seed.teacher_id

    r = client.get(f"/classrooms/{seed.classroom_id}/announcements", headers=auth(seed.student_a_id))
    assert r.status_code == 200, r.text
    assert [a["id"] for a in r.json()] == [created["id"]]

    r = client.get(f"/announcements/{created['id']}", headers=auth(seed.student_b_id))
    assert r.status_code == 200


def test_outsiders_cannot_read_or_post(client, auth, seed):
    created = post_announcement(client, auth, seed).json()

    r = client.get(f"/announcements/{created['id']}", headers=auth(seed.outsider_id))
    assert r.status_code == 403

    r = client.post(
        f"/classrooms/{seed.classroom_id}/announcements",
        headers=auth(seed.other_teacher_id),
        json={"title": "Hi", "content": "Not my class"},
    )
    assert r.status_code == 403
    assert r.json()["kind"] == "not_authorized"


def test_expired_announcements(client, auth, seed, clock):
    expires = (clock.now + timedelta(days=1)).isoformat()
    created = post_announcement(client, auth, seed, expires_at=expires).json()
    assert created["status"] == "active"

    clock.now = clock.now + timedelta(days=2)
    url = f"/classrooms/{seed.classroom_id}/announcements"

    r = client.get(url, headers=auth(seed.student_a_id))
    assert [a["status"] for a in r.json()] == ["expired"]

    r = client.get(url, headers=auth(seed.student_a_id), params={"include_expired": False})
    assert r.json() == []


def test_newest_first(client, auth, seed, clock):
    first = post_announcement(client, auth, seed, title="First").json()
    clock.now = clock.now + timedelta(hours=1)
    second = post_announcement(client, auth, seed, title="Second").json()

    r = client.get(f"/classrooms/{seed.classroom_id}/announcements", headers=auth(seed.teacher_id))
    assert [a["id"] for a in r.json()] == [second["id"], first["id"]]


def test_author_edits_and_deletes(client, auth, seed):
    created = post_announcement(client, auth, seed).json()
    url = f"/announcements/{created['id']}"

    r = client.patch(url, headers=auth(seed.teacher_id), json={"priority": "low", "title": "Quiz moved"})
    assert r.status_code == 200, r.text
    assert r.json()["priority"] == "low"
    assert r.json()["title"] == "Quiz moved"
    assert r.json()["content"] == "Chapters 1 to 3."

    r = client.patch(url, headers=auth(seed.student_a_id), json={"title": "hacked"})
    assert r.status_code == 403

    r = client.delete(url, headers=auth(seed.teacher_id))
    assert r.status_code == 204
    r = client.get(url, headers=auth(seed.teacher_id))
    assert r.status_code == 404


def test_expiry_with_offset_is_stored_in_utc(client, auth, seed, clock):
    # 10:00 at UTC+2 is 08:00 UTC
    created = post_announcement(client, auth, seed, expires_at="2024-01-06T10:00:00+02:00").json()
    url = f"/classrooms/{seed.classroom_id}/announcements"

    clock.now = clock.now.replace(day=6, hour=7, minute=30)
    r = client.get(url, headers=auth(seed.student_a_id))
    assert [a["status"] for a in r.json()] == ["active"]

    clock.now = clock.now.replace(hour=8, minute=30)
    r = client.get(url, headers=auth(seed.student_a_id))
    assert [a["id"] for a in r.json()] == [created["id"]]
    assert [a["status"] for a in r.json()] == ["expired"]
