import os
from datetime import datetime, timezone

TEST_DB_FILE = "test_school_portal.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# must be set before portal.db.session creates the app engine
os.environ["DATABASE_URL"] = TEST_DB_URL

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from portal.core.deps import get_db  # noqa: E402
from portal.db.base import Base  # noqa: E402
from portal.main import app  # noqa: E402
from portal.models.assignment import Assignment  # noqa: E402
from portal.models.classroom import Classroom  # noqa: E402
from portal.models.enrollment import Enrollment  # noqa: E402
from portal.models.grade import Grade  # noqa: E402
from portal.models.grade_settings import GradeSettings  # noqa: E402
from portal.models.module import Module  # noqa: E402
from portal.models.rubric import Rubric  # noqa: E402
from portal.models.submission import Submission  # noqa: E402
from portal.models.user import User  # noqa: E402

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PAST_DUE = datetime(2020, 1, 1, tzinfo=timezone.utc)
FUTURE_DUE = datetime(2099, 1, 1, tzinfo=timezone.utc)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


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
def seed_data():
    """Seed a clean minimal dataset for each test and return its ids."""
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        db.query(Grade).delete()
        db.query(Submission).delete()
        db.query(Rubric).delete()
        db.query(GradeSettings).delete()
        db.query(Enrollment).delete()
        db.query(Assignment).delete()
        db.query(Module).delete()
        db.query(Classroom).delete()
        db.query(User).delete()
        db.commit()

        # Users
        teacher = User(email="teacher1@example.com", full_name="Teacher One", role="teacher")
        student = User(email="student1@example.com", full_name="Student One", role="student")
        other = User(email="student2@example.com", full_name="Student Two", role="student")
        outsider = User(email="student3@example.com", full_name="Student Three", role="student")
        db.add_all([teacher, student, other, outsider])
        db.commit()

        # Classrooms
        classroom = Classroom(title="Biology", teacher_id=teacher.id)
        other_classroom = Classroom(title="Chemistry", teacher_id=teacher.id)
        db.add_all([classroom, other_classroom])
        db.commit()

        # Enrollments
        db.add_all(
            [
                Enrollment(classroom_id=classroom.id, student_id=student.id),
                Enrollment(classroom_id=classroom.id, student_id=other.id),
                Enrollment(classroom_id=other_classroom.id, student_id=student.id),
            ]
        )
        db.commit()

        # Assignments: one already past due, one far in the future
        homework = Assignment(
            classroom_id=classroom.id,
            title="Cell worksheet",
            category="Homework",
            points=100,
            due_at=PAST_DUE,
        )
        test = Assignment(
            classroom_id=classroom.id,
            title="Unit test",
            category="Tests",
            points=50,
            due_at=FUTURE_DUE,
        )
        lab = Assignment(
            classroom_id=other_classroom.id,
            title="Titration lab",
            category="Labs",
            points=20,
            due_at=PAST_DUE,
        )
        db.add_all([homework, test, lab])
        db.commit()

        ids = {
            "teacher_id": teacher.id,
            "student_id": student.id,
            "other_student_id": other.id,
            "outsider_id": outsider.id,
            "classroom_id": classroom.id,
            "other_classroom_id": other_classroom.id,
            "homework_id": homework.id,
            "test_id": test.id,
            "lab_id": lab.id,
        }
    finally:
        db.close()

    yield ids


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
