# /app/services/database_service.py

from typing import List, Dict, Optional, Generator
from sqlalchemy.orm import Session, sessionmaker
from fastapi import Depends

# --- Core Database Setup ---
from app.db import database
from app.db.database import get_db

# --- Repository Imports ---
from .database_helpers.class_student_repository_sql import ClassStudentRepositorySQL
from app.db.models.class_student_models import Class, Student


class DatabaseService:
    def __init__(self, db_session: Session):
        """
        Initializes the DatabaseService on top of an open SQLAlchemy session.
        """
        if db_session is None:
            raise ValueError("A database session is required.")
        self.class_student_repo = ClassStudentRepositorySQL(db_session)

    # --- CLASS & STUDENT METHODS (DELEGATED) ---
    def get_all_classes(self, has_report: Optional[bool] = None) -> List[Class]: return self.class_student_repo.get_all_classes(has_report)
    def get_class_by_id(self, class_id: str) -> Optional[Class]: return self.class_student_repo.get_class_by_id(class_id)
    def get_class_by_name(self, name: str) -> Optional[Class]: return self.class_student_repo.get_class_by_name(name)
    def add_class(self, class_record: Dict) -> Class: return self.class_student_repo.add_class(class_record)
    def count_classes_with_report(self) -> int: return self.class_student_repo.count_classes_with_report()
    def get_all_students(self) -> List[Student]: return self.class_student_repo.get_all_students()
    def get_students_by_class_id(self, class_id: str) -> List[Student]: return self.class_student_repo.get_students_by_class_id(class_id)
    def get_student(self, class_id: str, student_id: str) -> Optional[Student]: return self.class_student_repo.get_student(class_id, student_id)
    def get_student_by_name(self, class_id: str, name: str) -> Optional[Student]: return self.class_student_repo.get_student_by_name(class_id, name)
    def get_next_registration_no(self, class_id: str) -> int: return self.class_student_repo.get_next_registration_no(class_id)
    def add_student(self, student_record: Dict) -> Student: return self.class_student_repo.add_student(student_record)

    # --- REPORT METHODS (DELEGATED) ---
    def save_class_report(self, class_id: str, class_report: Dict, student_reports: Dict[str, Dict]) -> None:
        self.class_student_repo.save_class_report(class_id, class_report, student_reports)


# --- DEPENDENCY PROVIDERS ---
def get_db_service(db: Session = Depends(get_db)) -> Generator[DatabaseService, None, None]:
    """FastAPI dependency that provides a request-scoped DatabaseService."""
    yield DatabaseService(db_session=db)


def get_session_factory() -> sessionmaker:
    """
    FastAPI dependency that provides the session factory. Background jobs
    outlive the request, so they open their own sessions from it.
    """
    return database.SessionLocal
