"""
Student Dropout Risk Tracker - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Maps domain errors to JSON error responses
5. Registers the student API routes and a health check

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Risk model, report aggregation, record store, exporters
- logging_config.py: Structured logging configuration
- database.py: Database connection management
- config.py: Environment-driven settings
"""

import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dropout_tracker.config import ALLOW_ORIGINS, SERVICE_NAME, SERVICE_VERSION
from dropout_tracker.errors import ValidationError, AggregationError, StoreError
from dropout_tracker.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from dropout_tracker.routes import students
from dropout_tracker.database import DATABASE_URL, create_tables

# Import all models so they are registered with Base.metadata
from dropout_tracker.models.student import Student  # noqa: F401

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite, creating tables directly")
    create_tables()

# ──────────────────────────────────────────────────────────────
# Create FastAPI application
# ──────────────────────────────────────────────────────────────
app = FastAPI(
    title="Student Dropout Risk Tracker",
    description=(
        "Records per-student attendance, CGPA and assignment completion, "
        "derives a dropout probability and risk level, and serves sortable "
        "listings plus PDF and Excel risk reports."
    ),
    version=SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Content-Disposition"]
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Generates a unique UUID per incoming request, stores it in a
# context variable for all log entries, returns it in the
# X-Request-ID header, and logs request start/end with latency.
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Domain error handlers
# ──────────────────────────────────────────────────────────────
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Rejected student input: 422 with the offending field."""
    log_with_context(logger, "WARNING", f"Rejected student input: {exc}",
                     extra_data={"field": exc.field})
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": exc.message, "field": exc.field}
    )


@app.exception_handler(AggregationError)
async def aggregation_error_handler(request: Request, exc: AggregationError):
    log_with_context(logger, "WARNING", f"Invalid listing request: {exc}")
    return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    log_with_context(logger, "ERROR", f"Record store failure: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": exc.message, "error": exc.detail}
    )


app.include_router(students.router, tags=["Students"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for Docker health checks and monitoring."""
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "Student Dropout Risk Tracker",
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "create": "POST /api/students",
            "preview": "POST /api/students/preview",
            "list": "GET /api/students",
            "summary": "GET /api/students/summary",
            "pdf_report": "GET /api/students/report/pdf",
            "excel_report": "GET /api/students/report/excel"
        }
    }
