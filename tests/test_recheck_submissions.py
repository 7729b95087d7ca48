from datetime import timedelta

from classroom.models.assignment import Assignment
from classroom.scripts.recheck_submissions import run_recheck


def submit(client, auth, seed, student_id):
    r = client.post(
        f"/assignments/{seed.assignment_id}/submit",
        headers=auth(student_id),
        json={"response_text": "my answer"},
    )
    assert r.status_code == 200, r.text


def test_sweep_promotes_deliveries_past_grace(client, auth, seed, clock, db):
    submit(client, auth, seed, seed.student_a_id)
    clock.now = clock.now + timedelta(minutes=10)
    submit(client, auth, seed, seed.student_b_id)

    promoted = run_recheck(db, clock.now + timedelta(minutes=5), grace=timedelta(minutes=10))
    assert promoted == {seed.assignment_id: [seed.student_a_id]}

    db.expire_all()
    assignment = db.get(Assignment, seed.assignment_id)
    assert assignment.submissions[seed.student_a_id].status == "awaiting_correction"
    assert assignment.submissions[seed.student_b_id].status == "submitted"
    assert assignment.status == "awaiting_correction"


def test_sweep_is_harmless_when_run_twice(client, auth, seed, clock, db):
    submit(client, auth, seed, seed.student_a_id)
    later = clock.now + timedelta(hours=1)

    assert run_recheck(db, later) == {seed.assignment_id: [seed.student_a_id]}
    assert run_recheck(db, later) == {}


def test_single_delivery_recheck(client, auth, seed, clock, db):
    submit(client, auth, seed, seed.student_a_id)
    submit(client, auth, seed, seed.student_b_id)
    later = clock.now + timedelta(hours=1)

    promoted = run_recheck(
        db,
        later,
        assignment_id=seed.assignment_id,
        student_id=seed.student_b_id,
    )
    assert promoted == {seed.assignment_id: [seed.student_b_id]}

    db.expire_all()
    assignment = db.get(Assignment, seed.assignment_id)
    assert assignment.submissions[seed.student_a_id].status == "submitted"


def test_nothing_to_do(db, clock):
    assert run_recheck(db, clock.now) == {}
