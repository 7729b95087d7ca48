import os
from datetime import datetime, timezone
from types import SimpleNamespace

TEST_DB_FILE = "test_classroom.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# the app's own engine (used by startup create_all) must not touch the dev database
os.environ.setdefault("CLASSROOM_DATABASE_URL", TEST_DB_URL)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from classroom.core.deps import get_db, get_now  # noqa: E402
from classroom.core.security import create_access_token, hash_password  # noqa: E402
from classroom.db.base import Base  # noqa: E402
from classroom.main import app  # noqa: E402
from classroom.models.assignment import Assignment  # noqa: E402
from classroom.models.classroom import Classroom  # noqa: E402
from classroom.models.enums import ActivityType, Role  # noqa: E402
from classroom.models.user import User  # noqa: E402
from classroom.services import lifecycle  # noqa: E402

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD_HASH = hash_password("password123")

# seeded assignment is due 2024-01-10; the clock starts five days earlier
DUE_AT = datetime(2024, 1, 10, 0, 0, tzinfo=timezone.utc)
START = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def seed():
    """
    Seed a clean dataset for each test: one teacher with a classroom of three
    students (A, B, C), an outsider teacher, a student outside the classroom,
    and one assignment for the classroom due 2024-01-10.
    """
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())

    db = TestingSessionLocal()
    try:
        def user(email: str, role: Role) -> User:
            return User(
                email=email,
                full_name=email.split("@")[0].title(),
                role=role.value,
                hashed_password=PASSWORD_HASH,
            )

        teacher = user("teacher1@example.com", Role.TEACHER)
        other_teacher = user("teacher2@example.com", Role.TEACHER)
        student_a = user("student.a@example.com", Role.STUDENT)
        student_b = user("student.b@example.com", Role.STUDENT)
        student_c = user("student.c@example.com", Role.STUDENT)
        outsider = user("outsider@example.com", Role.STUDENT)
        admin = user("admin@example.com", Role.ADMIN)
        db.add_all([teacher, other_teacher, student_a, student_b, student_c, outsider, admin])
        db.commit()

        room = Classroom(
            name="Math 101",
            teacher_id=teacher.id,
            access_code="MATH01",
            students=[student_a, student_b, student_c],
        )
        db.add(room)
        db.commit()

        assignment = Assignment(
            teacher_id=teacher.id,
            title="Fractions worksheet",
            description="Solve the ten exercises on page 12.",
            activity_type=ActivityType.EXERCISE.value,
            topics=["fractions"],
            attachments=[],
            due_at=DUE_AT,
            points=10,
            is_visible=True,
            feedback_version=0,
            classrooms=[room],
        )
        lifecycle.assign_students(assignment, [student_a, student_b, student_c], START)
        db.add(assignment)
        db.commit()

        yield SimpleNamespace(
            teacher_id=teacher.id,
            other_teacher_id=other_teacher.id,
            student_a_id=student_a.id,
            student_b_id=student_b.id,
            student_c_id=student_c.id,
            outsider_id=outsider.id,
            admin_id=admin.id,
            classroom_id=room.id,
            assignment_id=assignment.id,
        )
    finally:
        db.close()


@pytest.fixture()
def clock():
    return FrozenClock(START)


@pytest.fixture()
def client(clock):
    """Test client that uses the test DB session and the frozen clock."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = clock
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_header(user_id: int) -> dict:
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth():
    return auth_header


@pytest.fixture()
def db():
    """Direct session on the test DB, for arranging state and checking rows."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
