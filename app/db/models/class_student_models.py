# /app/db/models/class_student_models.py

"""
This module defines the SQLAlchemy ORM models for the `Class` and `Student`
entities. A class owns a fixed subject catalogue and, once generated, a single
class report. Each student row holds the student's raw subject scores and,
after generation, the student's own report.
"""

from sqlalchemy import Column, String, Integer, JSON, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base_class import Base


class Class(Base):
    """
    SQLAlchemy model representing a class and its subject catalogue.

    `subjects` is a list of `{"name", "maxScore"}` objects and never changes
    after creation. `report` stays NULL until the class report is generated.
    """
    id = Column(String, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    subjects = Column(JSON, nullable=False)
    report = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # When a Class is deleted, all its child Student records are also deleted.
    students = relationship(
        "Student",
        back_populates="class_",
        cascade="all, delete-orphan",
        order_by="Student.registration_no",
    )


class Student(Base):
    """
    SQLAlchemy model representing a single student's record within a Class.

    `registration_no` is the 1-based order in which the student was added to
    the class. Report generation reads students in this order, which makes it
    the tie-break between equal scores.
    """
    __table_args__ = (
        UniqueConstraint("class_id", "name", name="uq_students_class_name"),
        UniqueConstraint("class_id", "registration_no", name="uq_students_class_registration"),
    )

    id = Column(String, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    registration_no = Column(Integer, nullable=False)
    # List of `{"subjectName", "score"}` objects, one per class subject.
    subjectScores = Column(JSON, nullable=False)
    report = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    class_id = Column(String, ForeignKey("classes.id"), nullable=False, index=True)
    class_ = relationship("Class", back_populates="students")
