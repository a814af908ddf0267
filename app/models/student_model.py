# /app/models/student_model.py

# --- Core Imports ---
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional

from .report_model import StudentReport

# --- Model Definitions ---

class StudentScoreInput(BaseModel):
    """A student's raw score for a single subject."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    subjectName: str = Field(..., min_length=1)
    score: int = Field(..., ge=0, description="Must not exceed the subject's maxScore.")


class StudentRecordCreate(BaseModel):
    """
    The model used for adding a student to a class. One score is expected for
    every subject of the class.
    """
    name: str = Field(..., min_length=1, description="The full name of the student. Unique within a class.")
    subjectScores: List[StudentScoreInput] = Field(..., min_length=1)


class Student(BaseModel):
    """
    The full representation of a Student record, as it is stored in the
    database and returned by the API.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="The unique, server-generated identifier for the student.")
    name: str
    class_id: str = Field(..., description="The ID of the class this student belongs to.")
    subjectScores: List[StudentScoreInput]
    report: Optional[StudentReport] = Field(
        default=None,
        description="The student's report. Null until the class report is generated."
    )
