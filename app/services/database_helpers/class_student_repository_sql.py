# /app/services/database_helpers/class_student_repository_sql.py

"""
This module contains all the raw SQLAlchemy queries for the Class and Student
tables. It is the direct interface to the database for class rosters, student
score records and generated reports.
"""

from typing import List, Dict, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.db.models.class_student_models import Class, Student


class ClassStudentRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    # --- Class Methods ---

    def get_all_classes(self, has_report: Optional[bool] = None) -> List[Class]:
        """
        Retrieves all classes. When `has_report` is given, only classes with
        (True) or without (False) a generated report are returned.
        """
        query = self.db.query(Class)
        if has_report is True:
            query = query.filter(Class.report.isnot(None))
        elif has_report is False:
            query = query.filter(Class.report.is_(None))
        return query.order_by(Class.created_at, Class.id).all()

    def get_class_by_id(self, class_id: str) -> Optional[Class]:
        return self.db.query(Class).filter(Class.id == class_id).first()

    def get_class_by_name(self, name: str) -> Optional[Class]:
        return self.db.query(Class).filter(Class.name == name).first()

    def add_class(self, record: Dict) -> Class:
        new_class = Class(**record)
        self.db.add(new_class)
        self.db.commit()
        self.db.refresh(new_class)
        return new_class

    def count_classes_with_report(self) -> int:
        return self.db.query(func.count(Class.id)).filter(Class.report.isnot(None)).scalar()

    # --- Student Methods ---

    def get_all_students(self) -> List[Student]:
        return self.db.query(Student).all()

    def get_students_by_class_id(self, class_id: str) -> List[Student]:
        """
        Retrieves all students for a given class in registration order. Report
        generation relies on this order being stable.
        """
        return (
            self.db.query(Student)
            .filter(Student.class_id == class_id)
            .order_by(Student.registration_no)
            .all()
        )

    def get_student(self, class_id: str, student_id: str) -> Optional[Student]:
        return (
            self.db.query(Student)
            .filter(Student.id == student_id, Student.class_id == class_id)
            .first()
        )

    def get_student_by_name(self, class_id: str, name: str) -> Optional[Student]:
        return (
            self.db.query(Student)
            .filter(Student.class_id == class_id, Student.name == name)
            .first()
        )

    def get_next_registration_no(self, class_id: str) -> int:
        last = self.db.query(func.max(Student.registration_no)).filter(Student.class_id == class_id).scalar()
        return (last or 0) + 1

    def add_student(self, record: Dict) -> Student:
        new_student = Student(**record)
        self.db.add(new_student)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(new_student)
        return new_student

    # --- Report Methods ---

    def save_class_report(self, class_id: str, class_report: Dict, student_reports: Dict[str, Dict]) -> None:
        """
        Stores a class report and every student report in one transaction.
        Refuses when the class already has a report or when a report targets a
        student that is not in the class, so nothing is written partially.
        """
        db_class = self.get_class_by_id(class_id)
        if db_class is None:
            raise NotFoundError(f"no record found for class with ID {class_id}")
        if db_class.report is not None:
            raise ConflictError("a report has already been generated for this class")

        students = {s.id: s for s in self.get_students_by_class_id(class_id)}
        unknown = [student_id for student_id in student_reports if student_id not in students]
        if unknown:
            raise NotFoundError(f"no record found for student(s) {', '.join(unknown)} in class {class_id}")

        try:
            db_class.report = class_report
            for student_id, report in student_reports.items():
                students[student_id].report = report
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
