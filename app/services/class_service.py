# /app/services/class_service.py

"""
This service module acts as the primary business logic layer for all
operations related to classes and students.

It serves as a facade, orchestrating calls to the `crud` helper and the
`DatabaseService`, and shaping ORM records into the API's Pydantic models.
"""

import pandas as pd
from typing import List, Optional

from ..core.exceptions import NotFoundError
from ..models import class_model, student_model
from .database_service import DatabaseService
from .class_helpers import crud


# --- Facade Methods for CRUD Operations ---

def create_class(class_data: class_model.ClassCreate, db: DatabaseService) -> class_model.Class:
    new_class = crud.create_class(class_data=class_data, db=db)
    return class_model.Class.model_validate(new_class)


def add_student_record(
    class_id: str,
    student_data: student_model.StudentRecordCreate,
    db: DatabaseService
) -> student_model.Student:
    new_student = crud.add_student_record(class_id=class_id, student_data=student_data, db=db)
    return student_model.Student.model_validate(new_student)


# --- Data Assembly Logic ---

def get_all_classes_with_summary(db: DatabaseService, has_report: Optional[bool] = None) -> List[class_model.ClassSummary]:
    """
    Retrieves all classes, optionally filtered by report status, and enriches
    them with student counts.
    """
    all_classes = db.get_all_classes(has_report=has_report)
    if not all_classes:
        return []

    students_df = pd.DataFrame([{"class_id": s.class_id} for s in db.get_all_students()])

    student_counts = {}
    if not students_df.empty:
        student_counts = students_df.groupby('class_id').size().to_dict()

    return [
        class_model.ClassSummary(
            id=cls.id,
            name=cls.name,
            studentCount=int(student_counts.get(cls.id, 0)),
            hasReport=cls.report is not None,
        )
        for cls in all_classes
    ]


def get_class_details_by_id(class_id: str, db: DatabaseService) -> Optional[class_model.ClassDetails]:
    """Assembles a class with its subjects, report and every student record."""
    class_info = db.get_class_by_id(class_id)
    if not class_info:
        return None

    students_in_class = db.get_students_by_class_id(class_id)
    return class_model.ClassDetails(
        id=class_info.id,
        name=class_info.name,
        subjects=class_info.subjects,
        report=class_info.report,
        students=[student_model.Student.model_validate(s) for s in students_in_class],
    )


def get_student_record(class_id: str, student_id: str, db: DatabaseService) -> student_model.Student:
    student = db.get_student(class_id=class_id, student_id=student_id)
    if not student:
        raise NotFoundError(f"no student with ID {student_id} in class {class_id}")
    return student_model.Student.model_validate(student)
