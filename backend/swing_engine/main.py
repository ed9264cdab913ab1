"""
Swing Analysis Engine - FastAPI Backend

Main application entry point and configuration.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from swing_engine.api.equipment import router as equipment_router
from swing_engine.api.recording import router as recording_router
from swing_engine.api.schemas import ErrorResponse
from swing_engine.api.swings import router as swings_router
from swing_engine.config import DATA_FOLDER_ENV, DEFAULT_DATA_FOLDER
from swing_engine.errors import (
    AnalysisTimeout,
    InsufficientData,
    MLModelUnavailable,
    SaveFailed,
    SwingAnalysisError,
)
from swing_engine.models.equipment import get_equipment_table
from swing_engine.services.recorder import get_recorder
from swing_engine.services.repository import get_repository, init_repository


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


ERROR_STATUS_CODES = {
    InsufficientData: 422,
    MLModelUnavailable: 503,
    AnalysisTimeout: 408,
    SaveFailed: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Swing Analysis Engine")

    repo = get_repository()
    if repo.data_folder is None:
        data_folder = Path(os.getenv(DATA_FOLDER_ENV, DEFAULT_DATA_FOLDER))
        init_repository(data_folder)
        logger.info(f"Initialized repository with folder: {data_folder}")

    logger.info(f"Loaded {len(get_equipment_table())} equipment profiles")

    yield

    get_recorder().reset()
    logger.info("Shutting down Swing Analysis Engine")


app = FastAPI(
    title="Swing Analysis Engine",
    description="""
    Real-time golf swing analysis from wrist-worn motion sensors.

    ## Features
    - Stream motion samples and track swing phases live
    - Aggregate fixed-schema features for the swing classifier
    - Estimate impact kinematics (peak acceleration, attack angle, swing path, tempo)
    - Physics-based carry and total distance with a confidence score

    ## Data Flow
    1. Start a session via POST /recording/start
    2. Push samples via POST /recording/samples
    3. Analyze the completed swing via POST /recording/analyze
    4. Browse stored swings via GET /swings
    """,
    version="0.1.0",
    lifespan=lifespan,
)


# CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SwingAnalysisError)
async def swing_error_handler(request: Request, exc: SwingAnalysisError):
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    body = ErrorResponse(detail=str(exc), code=exc.code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


# Include routers
app.include_router(swings_router)
app.include_router(recording_router)
app.include_router(equipment_router)


@app.get("/")
async def root():
    """Root endpoint - basic health check."""
    return {
        "name": "Swing Analysis Engine",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    repo = get_repository()
    recorder = get_recorder()

    return {
        "status": "healthy",
        "data_folder": str(repo.data_folder) if repo.data_folder else None,
        "session_count": repo.session_count,
        "recording_status": recorder.status.value,
        "equipment_count": len(get_equipment_table()),
    }
