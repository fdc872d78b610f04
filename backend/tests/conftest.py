import csv
from datetime import date
import io
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import schoolhub.models  # noqa: F401
from schoolhub.api.deps import get_db
from schoolhub.core.security import create_access_token
from schoolhub.db.base import Base
from schoolhub.main import app
from schoolhub.models import AcademicYear, Branch, RecordStatus, SchoolClass, Subject, Teacher, User, UserRole

CSV_HEADERS = [
    "Branch",
    "Class",
    "Academic Year",
    "Subject",
    "Teacher",
    "Date",
    "Day",
    "Start Time",
    "End Time",
    "Room Number",
    "Building Name",
    "Status",
]


def timetable_row(**overrides):
    row = {
        "Branch": "Science",
        "Class": "Grade 10A",
        "Academic Year": "2024-25",
        "Subject": "Physics",
        "Teacher": "John Smith",
        "Date": "2024-09-02",
        "Day": "",
        "Start Time": "09:00",
        "End Time": "10:00",
        "Room Number": "Room 204",
        "Building Name": "Science Block",
        "Status": "",
    }
    row.update(overrides)
    return row


def csv_bytes(rows):
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_HEADERS)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue().encode("utf-8")


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def school(db):
    """Two branches sharing one academic year, with a class, teachers and subjects in each."""
    science = Branch(short_name="SCI", legal_name="Science")
    literature = Branch(short_name="LIT", legal_name="Literature")
    closed = Branch(short_name="OLD", legal_name="Old Campus", status=RecordStatus.inactive)
    year = AcademicYear(name="2024-25", start_date=date(2024, 9, 1), end_date=date(2025, 6, 30))
    db.add_all([science, literature, closed, year])
    db.flush()

    grade_10a = SchoolClass(name="Grade 10A", branch_id=science.id, academic_year_id=year.id)
    grade_9b = SchoolClass(name="Grade 9B", branch_id=literature.id, academic_year_id=year.id)
    physics = Subject(name="Physics")
    chemistry = Subject(name="Chemistry")
    english = Subject(name="English Literature")
    john = Teacher(first_name="John", last_name="Smith", branch_id=science.id)
    jane = Teacher(first_name="Jane", last_name="Doe", branch_id=science.id)
    alice = Teacher(first_name="Alice", last_name="Johnson", branch_id=literature.id)
    db.add_all([grade_10a, grade_9b, physics, chemistry, english, john, jane, alice])
    db.commit()

    return SimpleNamespace(
        science=science,
        literature=literature,
        year=year,
        grade_10a=grade_10a,
        grade_9b=grade_9b,
        physics=physics,
        chemistry=chemistry,
        english=english,
        john=john,
        jane=jane,
        alice=alice,
    )


def make_user(db, *, email, role, hashed_password="not-a-real-hash"):
    user = User(name=email.split("@")[0], email=email, hashed_password=hashed_password, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin(db):
    return make_user(db, email="admin@example.com", role=UserRole.admin)


@pytest.fixture()
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_access_token(admin.id)}"}
