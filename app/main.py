# /app/main.py

# --- Core FastAPI Imports ---
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .core.logging import setup_logging
from .db import database

# --- Application-specific Router Imports ---
from .routers import classes_router, dashboard_router
from .services.report_tasks import report_tracker

setup_logging()
logger = logging.getLogger(__name__)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Runs once when the application starts up.
    database.init_db()
    logger.info("SCOMP backend has started.")
    yield
    # Runs once on shutdown. Reports still being computed must be saved
    # before the database connections go away.
    await report_tracker.wait()
    database.engine.dispose()
    logger.info("SCOMP backend shut down successfully.")

# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="SCOMP Backend API",
    description="Class result computation: subjects, student scores, rankings and graded reports.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Router Inclusion ---
app.include_router(dashboard_router.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(classes_router.router, prefix="/api/classes", tags=["Classes"])

# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "SCOMP Backend is running!", "version": app.version}
