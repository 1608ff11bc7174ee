"""
Campus-to-Corporate Placement Prep Portal - Main Application

FastAPI backend with:
- MongoDB for users, content, tasks, submissions and experiences
- LLM judge (OpenAI-compatible) for coding-question grading
- JWT authentication

Run: uvicorn placement_prep.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from placement_prep.api.routes import api_router
from placement_prep.core.config import get_settings
from placement_prep.core.errors import DuplicateSubmissionError, PortalError
from placement_prep.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)
    yield


# Create FastAPI app
app = FastAPI(
    title="Placement Prep Portal",
    description="""
    Student placement-preparation portal.

    ## Features
    - **Authentication**: JWT-based auth for students and alumni
    - **Categories**: Dream Package, Super Dream Package, Higher Studies
    - **Content**: Weekly resources with per-resource completion tracking
    - **Tasks**: Weekly MCQ + coding assessments, graded on submission
    - **Grading**: Deterministic MCQ scoring, LLM-judged coding answers
    - **Experiences**: Alumni placement stories, searchable by company
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(DuplicateSubmissionError)
async def duplicate_submission_handler(request: Request, exc: DuplicateSubmissionError):
    """An already graded task sends the client to its stored result."""
    return RedirectResponse(url=str(request.url_for("get_submission", task_id=exc.task_id)), status_code=303)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Only the first problem is reported, as a short message."""
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=400, content={"detail": "Invalid request payload"})
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return JSONResponse(status_code=400, content={"detail": f"{location}: {message}" if location else message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred"})


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
