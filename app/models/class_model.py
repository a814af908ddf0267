# /app/models/class_model.py

# --- Core Imports ---
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional

from .report_model import ClassReport
from .student_model import Student


class SubjectDefinition(BaseModel):
    """
    A gradable subject within a class. Frozen, and therefore hashable, because
    a class's subject catalogue never changes once the class exists.
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    name: str = Field(..., min_length=1, description="Subject name, unique within the class. Case sensitive.")
    maxScore: int = Field(..., ge=1, description="The maximum attainable score for this subject.")


class ClassCreate(BaseModel):
    """The model used for creating a new class."""
    name: str = Field(..., min_length=1, description="The class name. Must be unique.")
    subjects: List[SubjectDefinition] = Field(..., min_length=1)


class Class(BaseModel):
    """A class as stored in the database and returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    subjects: List[SubjectDefinition]
    report: Optional[ClassReport] = None


class ClassSummary(BaseModel):
    id: str
    name: str
    studentCount: int = Field(default=0)
    hasReport: bool = Field(default=False)


class ClassDetails(Class):
    """A class together with every student record, used by the class details view."""
    students: List[Student] = Field(default_factory=list)
