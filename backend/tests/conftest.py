"""Shared fixtures: in-memory database, API client and record factory."""

import os

# Keep the application's own engine off the filesystem during tests
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dropout_tracker.database import Base, get_db
from dropout_tracker.main import app
from dropout_tracker.models.student import Student
from dropout_tracker.services import risk_model

BASE_TIME = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_student(name, attendance, cgpa, assignment_completion, minutes=0):
    """Unsaved Student with derived fields computed the same way the store does."""
    result = risk_model.score(attendance, cgpa, assignment_completion)
    return Student(
        id="id-{}".format(name),
        name=name,
        attendance=attendance,
        cgpa=cgpa,
        assignment_completion=assignment_completion,
        dropout_probability=result.probability,
        risk_level=result.tier.value,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


@pytest.fixture
def cohort():
    """Small mixed cohort, listed in creation order."""
    return [
        make_student("Priya Sharma", 95, 9.2, 98, minutes=0),     # 6  Low
        make_student("Rohan Iyer", 40, 4.0, 30, minutes=1),       # 62 Medium
        make_student("Ananya Reddy", 10, 2.0, 5, minutes=2),      # 87 High
        make_student("vikram singh", 75, 7.5, 70, minutes=3),     # 26 Low
        make_student("Meera Nair", 50, 5.0, 50, minutes=4),       # 50 Medium
        make_student("Arjun Das", 20, 3.0, 20, minutes=5),        # 76 High
    ]
