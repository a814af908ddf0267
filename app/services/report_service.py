# /app/services/report_service.py

"""
This module orchestrates class report generation around the pure
`report_engine`.

The flow is split in two so the HTTP request never waits for the computation:

1. `prepare_report_snapshot` runs inside the request. It enforces the rules a
   client can act on (class exists, no report yet, enough students) and
   assembles an immutable snapshot of the subjects and scores.
2. `generate_and_store_report` runs later as a background task. It computes
   the report off the event loop and persists every output in one
   transaction. Failures here are server-side problems; they are logged with
   full detail by the task tracker and never shown to a client.

`request_class_report` ties both together and is what the router calls.
"""

import asyncio
import logging
from typing import Dict, List, Tuple

import pandas as pd
from sqlalchemy.orm import sessionmaker

from ..core.exceptions import ConflictError, NotFoundError
from ..models.class_model import SubjectDefinition
from ..models.student_model import StudentScoreInput
from ..models.report_model import ReportRequestResponse, StudentReport
from . import report_engine
from .database_service import DatabaseService
from .report_tasks import ReportTaskTracker

logger = logging.getLogger(__name__)

# A class needs at least this many students before it can be ranked.
MIN_STUDENTS_FOR_REPORT = 2


def _task_name(class_id: str) -> str:
    return f"class-report:{class_id}"


def prepare_report_snapshot(
    class_id: str, db: DatabaseService
) -> Tuple[List[SubjectDefinition], Dict[str, List[StudentScoreInput]]]:
    """
    Validates that a report may be generated for the class and returns the
    `(subjects, scores)` snapshot the engine consumes. Students are listed in
    registration order, which is the engine's tie-break order.
    """
    class_record = db.get_class_by_id(class_id)
    if not class_record:
        raise NotFoundError(f"no record found for class with ID {class_id}")

    if class_record.report is not None:
        raise ConflictError("a report has already been generated for this class")

    students = db.get_students_by_class_id(class_id)
    if len(students) < MIN_STUDENTS_FOR_REPORT:
        raise ValueError(
            f"a minimum of {MIN_STUDENTS_FOR_REPORT} students is required to generate a report for this class"
        )

    subjects = [SubjectDefinition.model_validate(s) for s in class_record.subjects]
    scores = {
        student.id: [StudentScoreInput.model_validate(entry) for entry in student.subjectScores]
        for student in students
    }
    return subjects, scores


async def generate_and_store_report(
    class_id: str,
    subjects: List[SubjectDefinition],
    scores: Dict[str, List[StudentScoreInput]],
    session_factory: sessionmaker,
) -> None:
    """Computes the report for a prepared snapshot and saves it exactly once."""
    # CPU-bound.
    class_report, student_reports = await asyncio.to_thread(
        report_engine.compute_report, subjects, scores
    )

    session = session_factory()
    try:
        DatabaseService(session).save_class_report(
            class_id,
            class_report.model_dump(mode="json"),
            {student_id: report.model_dump(mode="json") for student_id, report in student_reports.items()},
        )
    finally:
        session.close()

    logger.info("Saved report for class %s (%d students).", class_id, class_report.totalStudents)


def request_class_report(
    class_id: str,
    db: DatabaseService,
    session_factory: sessionmaker,
    tracker: ReportTaskTracker,
) -> ReportRequestResponse:
    """
    Validates the request and schedules report generation in the background.
    Must be called from a running event loop.
    """
    if tracker.has_pending(_task_name(class_id)):
        raise ConflictError("a report is already being generated for this class")

    subjects, scores = prepare_report_snapshot(class_id, db)
    tracker.schedule(
        generate_and_store_report(class_id, subjects, scores, session_factory),
        name=_task_name(class_id),
    )
    logger.info("Scheduled report generation for class %s (%d students).", class_id, len(scores))
    return ReportRequestResponse(classId=class_id)


def export_report_as_csv(class_id: str, db: DatabaseService) -> str:
    """
    Generates a CSV of the class report: one row per student in class
    position order, followed by each subject's score, position and grade.
    """
    class_details = db.get_class_by_id(class_id)
    if not class_details:
        raise NotFoundError(f"no record found for class with ID {class_id}")
    if class_details.report is None:
        raise ValueError("no report has been generated for this class yet")

    subject_names = [s["name"] for s in class_details.subjects]
    export_data = []
    for student in db.get_students_by_class_id(class_id):
        report = StudentReport.model_validate(student.report)
        row = {
            'Position': report.classPosition,
            'Student Name': student.name,
            'Total Score': report.totalScore,
            'Percentage': round(report.totalScorePercentage, 1),
            'Grade': report.classGrade,
        }
        for subject in report.subjectReports:
            row[f'{subject.subjectName} Score'] = subject.score
            row[f'{subject.subjectName} Position'] = subject.subjectPosition
            row[f'{subject.subjectName} Grade'] = subject.subjectGrade
        export_data.append(row)

    columns = ['Position', 'Student Name', 'Total Score', 'Percentage', 'Grade'] + [
        f'{name} {field}' for name in subject_names for field in ('Score', 'Position', 'Grade')
    ]
    df = pd.DataFrame(export_data, columns=columns).sort_values('Position')
    return df.to_csv(index=False)
