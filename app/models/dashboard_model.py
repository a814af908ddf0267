# /app/models/dashboard_model.py

# --- Core Imports ---
from pydantic import BaseModel, Field

# --- Model Definition ---

class DashboardSummary(BaseModel):
    """
    Defines the data contract for the response of the dashboard summary endpoint.
    """

    classCount: int = Field(
        ...,
        description="The total number of classes.",
        examples=[4]
    )

    studentCount: int = Field(
        ...,
        description="The total number of student records across all classes.",
        examples=[112]
    )

    reportCount: int = Field(
        ...,
        description="The number of classes whose report has been generated.",
        examples=[1]
    )
