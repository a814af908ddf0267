# /app/services/dashboard_service.py

# --- Core Imports ---
import logging

from ..models.dashboard_model import DashboardSummary
from .database_service import DatabaseService

logger = logging.getLogger(__name__)

# --- Core Public Function ---

def get_summary_data(db: DatabaseService) -> DashboardSummary:
    """
    Calculates the dashboard summary statistics by retrieving data from the
    database service and performing aggregations.

    Args:
        db: An instance of the DatabaseService, provided by dependency injection.

    Returns:
        A DashboardSummary Pydantic object containing the calculated counts.
    """
    try:
        all_classes = db.get_all_classes()
        all_students = db.get_all_students()

        return DashboardSummary(
            classCount=len(all_classes),
            studentCount=len(all_students),
            reportCount=db.count_classes_with_report(),
        )
    except Exception:
        logger.exception("Error calculating dashboard summary data.")
        # Re-raise the exception to be handled as a 500 error in the router layer.
        raise
