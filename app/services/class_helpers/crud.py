# /app/services/class_helpers/crud.py

"""
Core business rules for creating classes and registering student score
records. Everything that reaches the report engine has passed through the
checks in this module first.
"""

import os
import uuid
import logging
from typing import Dict

from sqlalchemy.exc import IntegrityError

from ...core.exceptions import ConflictError, NotFoundError
from ...models import class_model, student_model
from ..database_service import DatabaseService
from ...db.models.class_student_models import Class, Student

logger = logging.getLogger(__name__)

# Number of subjects every class must define.
REQUIRED_CLASS_SUBJECTS = int(os.getenv("REQUIRED_CLASS_SUBJECTS", "10"))

# Inserts tried before a registration-number conflict is reported as an error.
REGISTRATION_ATTEMPTS = 5


# --- CLASS-RELATED CORE BUSINESS LOGIC ---

def create_class(class_data: class_model.ClassCreate, db: DatabaseService) -> Class:
    """Creates a new class with its subject catalogue."""
    name = class_data.name.strip()
    if not name:
        raise ValueError("missing class name")

    if len(class_data.subjects) != REQUIRED_CLASS_SUBJECTS:
        raise ValueError(f"{REQUIRED_CLASS_SUBJECTS} class subjects are required to create a class")

    seen = set()
    for index, subject in enumerate(class_data.subjects, start=1):
        if not subject.name.strip():
            raise ValueError(f"subject {index} is missing subject name")
        if subject.name in seen:
            raise ValueError(f"subject name {subject.name} is listed more than once")
        seen.add(subject.name)

    if db.get_class_by_name(name):
        raise ConflictError(f"class name {name} already exists")

    new_class_record = {
        "id": f"cls_{uuid.uuid4().hex[:12]}",
        "name": name,
        "subjects": [subject.model_dump() for subject in class_data.subjects],
    }
    new_class = db.add_class(new_class_record)
    logger.info("Created class %s (%s) with %d subjects.", new_class.id, name, len(class_data.subjects))
    return new_class


# --- STUDENT-RELATED CORE BUSINESS LOGIC ---

def _validate_subject_scores(db_class: Class, student_data: student_model.StudentRecordCreate):
    """Exactly one in-range score for every subject of the class. Names are case sensitive."""
    catalogue: Dict[str, int] = {s["name"]: s["maxScore"] for s in db_class.subjects}

    if len(student_data.subjectScores) != len(catalogue):
        raise ValueError(f"{len(catalogue)} class subjects are required to save a student's record")

    seen = set()
    for index, entry in enumerate(student_data.subjectScores, start=1):
        if not entry.subjectName:
            raise ValueError(f"student subject {index} is missing subject name")

        max_score = catalogue.get(entry.subjectName)
        if max_score is None:
            raise ValueError(
                f"subject name {entry.subjectName} does not exist, check spelling as subject names are case sensitive."
            )
        if entry.subjectName in seen:
            raise ValueError(f"subject {entry.subjectName} has more than one score")
        seen.add(entry.subjectName)

        if entry.score < 0:
            raise ValueError(f"subject {entry.subjectName} has an invalid score {entry.score}")
        if entry.score > max_score:
            raise ValueError(
                f"student score ({entry.score}) for subject {entry.subjectName} exceeds "
                f"the maximum score ({max_score}) for this subject"
            )


def add_student_record(class_id: str, student_data: student_model.StudentRecordCreate, db: DatabaseService) -> Student:
    """Adds a student and their subject scores to a class that has no report yet."""
    db_class = db.get_class_by_id(class_id)
    if not db_class:
        raise NotFoundError(f"class with ID {class_id} does not exist")

    if db_class.report is not None:
        raise ConflictError("cannot add student record to class with a finalized report")

    name = student_data.name.strip()
    if not name:
        raise ValueError("missing student name")

    _validate_subject_scores(db_class, student_data)

    # Registration numbers are unique per class. A concurrent insert can take
    # the number read here, in which case the insert is retried with a new one.
    for attempt in range(1, REGISTRATION_ATTEMPTS + 1):
        if db.get_student_by_name(class_id, name):
            raise ConflictError(f"student name {name} has already been added to this class")

        new_student_record = {
            "id": f"stu_{uuid.uuid4().hex[:12]}",
            "name": name,
            "class_id": class_id,
            "registration_no": db.get_next_registration_no(class_id),
            "subjectScores": [entry.model_dump() for entry in student_data.subjectScores],
        }
        try:
            return db.add_student(new_student_record)
        except IntegrityError:
            if attempt == REGISTRATION_ATTEMPTS:
                raise
            logger.warning(
                "Registration number %d in class %s was taken concurrently; retrying (attempt %d).",
                new_student_record["registration_no"], class_id, attempt,
            )
