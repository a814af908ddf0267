# /tests/conftest.py

import os

# Keep the application's own engine in memory; tests use their own database.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db.base import Base
from app.models.class_model import ClassCreate, SubjectDefinition
from app.models.student_model import StudentRecordCreate, StudentScoreInput
from app.services import class_service
from app.services.class_helpers import crud
from app.services.database_service import DatabaseService

SUBJECT_NAMES = ["Mathematics", "English", "Physics"]


@pytest.fixture(autouse=True)
def three_subject_classes(monkeypatch):
    """Classes in the test suite have three subjects instead of ten."""
    monkeypatch.setattr(crud, "REQUIRED_CLASS_SUBJECTS", len(SUBJECT_NAMES))


@pytest.fixture
def session_factory(tmp_path):
    """A fresh SQLite database file for each test function."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'scomp_test.db'}",
        connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db_service(session_factory):
    session = session_factory()
    yield DatabaseService(session)
    session.close()


@pytest.fixture
def subjects():
    return [SubjectDefinition(name=name, maxScore=100) for name in SUBJECT_NAMES]


@pytest.fixture
def make_class(db_service, subjects):
    """Creates a class through the service layer and returns its API model."""
    def _make_class(name="JSS 1A", class_subjects=None):
        return class_service.create_class(
            ClassCreate(name=name, subjects=class_subjects or subjects), db=db_service
        )
    return _make_class


@pytest.fixture
def add_student(db_service):
    """Adds a student whose scores are given in SUBJECT_NAMES order."""
    def _add_student(class_id, name, scores):
        record = StudentRecordCreate(
            name=name,
            subjectScores=[
                StudentScoreInput(subjectName=subject, score=score)
                for subject, score in zip(SUBJECT_NAMES, scores)
            ],
        )
        return class_service.add_student_record(class_id, record, db=db_service)
    return _add_student
