# /app/services/report_engine.py

"""
This module is the report computation engine. It turns a class's subject
catalogue and a snapshot of every student's raw subject scores into:

1. One `StudentReport` per student: total score, total percentage, class
   position and grade, plus a `SubjectReport` per subject with the subject
   percentage, subject position and grade.
2. One `ClassReport`: student count and the highest and lowest total scores.

Positions are never shared. Students with the same score receive different,
consecutive positions. Ties are broken by the student's place in the input
snapshot (the iteration order of the `scores` mapping), so callers must hand
students over in a stable order, e.g. registration order.

The engine is pure: no I/O, no shared state. Every call builds its own
DataFrames and returns fresh value objects, so independent calls can run on
any thread at the same time.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from ..models.class_model import SubjectDefinition
from ..models.student_model import StudentScoreInput
from ..models.report_model import ClassReport, StudentReport, SubjectReport

logger = logging.getLogger(__name__)

# Thresholds are exclusive lower bounds: a percentage must be strictly greater
# than the threshold to earn the grade. Anything at or below the last
# threshold fails.
GRADE_BANDS: List[Tuple[int, str]] = [
    (69, "Excellent"),
    (59, "Good"),
    (49, "Fair"),
    (40, "Pass"),
]
FAILING_GRADE = "Fail"

# Best first.
GRADE_ORDER: List[str] = [grade for _, grade in GRADE_BANDS] + [FAILING_GRADE]

_SCORE_COLUMNS = ["student_id", "order", "seq", "subject_name", "score"]


class ReportPreconditionError(ValueError):
    """The snapshot handed to the engine cannot produce a valid report."""


# --- PURE HELPERS ---

def as_percentage(score: int, out_of: int) -> float:
    """The one percentage formula used for every figure in a report."""
    return score / out_of * 100


def grade_for_percentage(percentage: float) -> str:
    for threshold, grade in GRADE_BANDS:
        if percentage > threshold:
            return grade
    return FAILING_GRADE


def _build_catalogue(subjects: Iterable[SubjectDefinition]) -> Dict[str, int]:
    """Maps subject name to max score, rejecting catalogues that can't be graded."""
    catalogue: Dict[str, int] = {}
    for subject in subjects:
        if subject.name in catalogue:
            raise ReportPreconditionError(f"duplicate subject name {subject.name!r}")
        if subject.maxScore < 1:
            raise ReportPreconditionError(
                f"subject {subject.name!r} has an invalid max score {subject.maxScore}"
            )
        catalogue[subject.name] = subject.maxScore

    if not catalogue:
        raise ReportPreconditionError("cannot compute a report for a class without subjects")
    return catalogue


def _build_score_frame(
    catalogue: Dict[str, int],
    scores: Mapping[str, Sequence[StudentScoreInput]],
) -> pd.DataFrame:
    """
    Flattens the snapshot into one row per score entry. `order` is the
    student's place in the snapshot and `seq` the entry's place overall; both
    serve as tie-break keys when ranking.
    """
    rows = []
    for order, (student_id, entries) in enumerate(scores.items()):
        for entry in entries:
            max_score = catalogue.get(entry.subjectName)
            if max_score is None:
                raise ReportPreconditionError(
                    f"student {student_id} has a score for unknown subject {entry.subjectName!r}"
                )
            if not 0 <= entry.score <= max_score:
                raise ReportPreconditionError(
                    f"student {student_id} scored {entry.score} in {entry.subjectName!r}, "
                    f"outside the range 0-{max_score}"
                )
            rows.append((student_id, order, len(rows), entry.subjectName, entry.score))

    return pd.DataFrame(rows, columns=_SCORE_COLUMNS)


def _rank_subjects(frame: pd.DataFrame) -> pd.DataFrame:
    """Adds a `position` column: 1-based rank of each row within its subject."""
    ranked = frame.sort_values(
        ["score", "order", "seq"], ascending=[False, True, True], kind="mergesort"
    )
    positions = ranked.groupby("subject_name", sort=False).cumcount() + 1
    # `assign` aligns on the index, so rows keep their original order.
    return frame.assign(position=positions)


def _rank_students(frame: pd.DataFrame, student_ids: List[str]) -> pd.DataFrame:
    """
    One row per student with `total_score` and `position`, sorted best first.
    Students without a single score entry still get a row with a total of 0.
    """
    totals = frame.groupby("student_id", sort=False)["score"].sum()
    standings = pd.DataFrame({"student_id": student_ids, "order": range(len(student_ids))})
    standings["total_score"] = standings["student_id"].map(totals).fillna(0).astype(int)
    standings = standings.sort_values(
        ["total_score", "order"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)
    standings["position"] = standings.index + 1
    return standings


# --- PUBLIC ENTRY POINT ---

def compute_report(
    subjects: Iterable[SubjectDefinition],
    scores: Mapping[str, Sequence[StudentScoreInput]],
    generated_at: Optional[datetime] = None,
) -> Tuple[ClassReport, Dict[str, StudentReport]]:
    """
    Computes the class report and every student report for one class.

    Args:
        subjects: The class's subject catalogue. Order does not matter.
        scores: Student ID -> that student's subject scores. Iteration order
            decides which of two tied students ranks higher.
        generated_at: Timestamp stamped on every output record. Defaults to
            the current UTC time, read once.

    Returns:
        The `ClassReport` and a dict of student ID -> `StudentReport`, in
        class position order.

    Raises:
        ReportPreconditionError: no subjects, no students, or a score entry
            that references an unknown subject or falls outside its range.
    """
    catalogue = _build_catalogue(subjects)
    total_max_score = sum(catalogue.values())

    if not scores:
        raise ReportPreconditionError("cannot compute a report without any student scores")

    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    student_ids = list(scores)
    frame = _rank_subjects(_build_score_frame(catalogue, scores))
    standings = _rank_students(frame, student_ids)

    # Subject reports keep each student's own entry order.
    subject_reports: Dict[str, List[SubjectReport]] = {student_id: [] for student_id in student_ids}
    for row in frame.itertuples(index=False):
        score = int(row.score)
        percentage = as_percentage(score, catalogue[row.subject_name])
        subject_reports[row.student_id].append(SubjectReport(
            subjectName=row.subject_name,
            score=score,
            subjectPercentage=percentage,
            subjectPosition=int(row.position),
            subjectGrade=grade_for_percentage(percentage),
        ))

    student_reports: Dict[str, StudentReport] = {}
    for row in standings.itertuples(index=False):
        total_score = int(row.total_score)
        percentage = as_percentage(total_score, total_max_score)
        student_reports[row.student_id] = StudentReport(
            studentId=row.student_id,
            totalScore=total_score,
            totalScorePercentage=percentage,
            classPosition=int(row.position),
            classGrade=grade_for_percentage(percentage),
            subjectReports=subject_reports[row.student_id],
            generatedAt=generated_at,
        )

    highest = int(standings["total_score"].max())
    lowest = int(standings["total_score"].min())
    class_report = ClassReport(
        totalStudents=len(student_ids),
        highestStudentScore=highest,
        highestStudentScoreAsPercentage=as_percentage(highest, total_max_score),
        lowestStudentScore=lowest,
        lowestStudentScoreAsPercentage=as_percentage(lowest, total_max_score),
        generatedAt=generated_at,
    )

    logger.info(
        "Computed report for %d students across %d subjects (total max score %d).",
        len(student_ids), len(catalogue), total_max_score,
    )
    return class_report, student_reports
