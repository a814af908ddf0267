# /app/routers/classes_router.py

"""
This module defines all API endpoints for classes, their student records and
the class report.

Service-level `ValueError`s carry user-facing messages and are returned as
4xx responses. Anything else is an internal error: it is logged in full and
the client only sees a generic message.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import sessionmaker

from ..core.exceptions import ConflictError, NotFoundError
from ..models import class_model, student_model, report_model
from ..services import class_service, database_service, report_service
from ..services.report_tasks import ReportTaskTracker, get_report_tracker

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http_error(e: ValueError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=422, detail=str(e))


def _internal_error(action: str) -> HTTPException:
    logger.exception("Unexpected error while trying to %s.", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected server error occurred."
    )


# --- CLASS COLLECTION ENDPOINTS (/api/classes) ---

@router.get("", response_model=List[class_model.ClassSummary], summary="Get All Classes with Student Counts")
def get_all_classes(
    has_report: Optional[bool] = Query(None, alias="hasReport"),
    db: database_service.DatabaseService = Depends(database_service.get_db_service)
):
    return class_service.get_all_classes_with_summary(db=db, has_report=has_report)


@router.post("", response_model=class_model.Class, status_code=status.HTTP_201_CREATED, summary="Create a New Class")
def create_new_class(class_create: class_model.ClassCreate, db: database_service.DatabaseService = Depends(database_service.get_db_service)):
    try:
        return class_service.create_class(class_data=class_create, db=db)
    except ValueError as e:
        raise _to_http_error(e)
    except Exception:
        raise _internal_error("create a class")


# --- INDIVIDUAL CLASS RESOURCE ENDPOINTS (/api/classes/{class_id}) ---

@router.get("/{class_id}", response_model=class_model.ClassDetails, summary="Get a Single Class with Full Details")
def get_class_by_id(class_id: str, db: database_service.DatabaseService = Depends(database_service.get_db_service)):
    class_details = class_service.get_class_details_by_id(class_id=class_id, db=db)
    if class_details is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Class with ID {class_id} not found")
    return class_details


# --- STUDENT SUB-RESOURCE ENDPOINTS ---

@router.post("/{class_id}/students", response_model=student_model.Student, status_code=status.HTTP_201_CREATED, summary="Add a Student Record to a Class")
def add_student(class_id: str, student_create: student_model.StudentRecordCreate, db: database_service.DatabaseService = Depends(database_service.get_db_service)):
    try:
        return class_service.add_student_record(class_id=class_id, student_data=student_create, db=db)
    except ValueError as e:
        raise _to_http_error(e)
    except Exception:
        raise _internal_error("add a student record")


@router.get("/{class_id}/students/{student_id}", response_model=student_model.Student, summary="Get a Student Record")
def get_student(class_id: str, student_id: str, db: database_service.DatabaseService = Depends(database_service.get_db_service)):
    try:
        return class_service.get_student_record(class_id=class_id, student_id=student_id, db=db)
    except ValueError as e:
        raise _to_http_error(e)


# --- CLASS REPORT ENDPOINTS ---

@router.post(
    "/{class_id}/report",
    response_model=report_model.ReportRequestResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Generate the Class Report"
)
async def generate_class_report(
    class_id: str,
    db: database_service.DatabaseService = Depends(database_service.get_db_service),
    session_factory: sessionmaker = Depends(database_service.get_session_factory),
    tracker: ReportTaskTracker = Depends(get_report_tracker)
):
    """
    Validates the class and schedules report computation in the background.
    The report is generated once; later requests are rejected with 409.
    """
    try:
        return report_service.request_class_report(
            class_id=class_id, db=db, session_factory=session_factory, tracker=tracker
        )
    except ValueError as e:
        raise _to_http_error(e)
    except Exception:
        raise _internal_error("schedule a class report")


@router.get("/{class_id}/report/export", summary="Export the Class Report as CSV", response_class=StreamingResponse)
def export_class_report_csv(class_id: str, db: database_service.DatabaseService = Depends(database_service.get_db_service)):
    try:
        csv_string = report_service.export_report_as_csv(class_id=class_id, db=db)
    except ValueError as e:
        raise _to_http_error(e)

    class_details = db.get_class_by_id(class_id)
    file_name = f"report_{class_details.name.replace(' ', '_').lower()}.csv"
    return StreamingResponse(
        iter([csv_string]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={file_name}"}
    )
