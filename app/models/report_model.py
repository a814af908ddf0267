# /app/models/report_model.py

"""
Pydantic data contracts for the outputs of report generation. These are the
value objects produced by the report engine, persisted as JSON on the class
and student rows, and returned by the API.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, ConfigDict


class SubjectReport(BaseModel):
    """One subject's result for one student."""
    model_config = ConfigDict(from_attributes=True)

    subjectName: str
    score: int
    subjectPercentage: float = Field(..., description="score / subject maxScore * 100, unrounded.")
    subjectPosition: int = Field(..., ge=1, description="1-based rank among students who took the subject. Never shared.")
    subjectGrade: str


class StudentReport(BaseModel):
    """The full report for one student."""
    model_config = ConfigDict(from_attributes=True)

    studentId: str
    totalScore: int
    totalScorePercentage: float = Field(..., description="totalScore / class totalMaxScore * 100, unrounded.")
    classPosition: int = Field(..., ge=1, description="1-based rank within the class. Never shared.")
    classGrade: str
    subjectReports: List[SubjectReport]
    generatedAt: datetime


class ClassReport(BaseModel):
    """The class-level summary, generated once per class."""
    model_config = ConfigDict(from_attributes=True)

    totalStudents: int
    highestStudentScore: int
    highestStudentScoreAsPercentage: float
    lowestStudentScore: int
    lowestStudentScoreAsPercentage: float
    generatedAt: datetime


class ReportRequestResponse(BaseModel):
    """Response returned when report generation has been scheduled."""
    classId: str
    status: str = Field(default="Accepted")
    message: str = Field(default="Report generation has started.")
