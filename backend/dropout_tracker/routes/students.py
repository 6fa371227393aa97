"""
Student API routes - record creation, listing and report downloads.

Provides endpoints for:
- Creating a student record (risk computed before insert)
- Previewing the risk for live form input without saving
- Listing students with search, risk filter, sorting and pagination
- Summary counts per risk level
- PDF and Excel report downloads
"""

import time
from typing import Optional, Union
from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from dropout_tracker.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from dropout_tracker.database import get_db
from dropout_tracker.services import report_aggregator, risk_model
from dropout_tracker.services.exporters import (
    render_pdf_report, render_excel_report,
    PDF_FILENAME, EXCEL_FILENAME, EXCEL_MEDIA_TYPE
)
from dropout_tracker.services.report_aggregator import SortKey, SortDirection
from dropout_tracker.services.student_store import create_student, list_students, validate_scores
from dropout_tracker.logging_config import get_logger, log_with_context

router = APIRouter(prefix="/api/students")
logger = get_logger("http")
reports_logger = get_logger("reports")


# ── Pydantic schemas ─────────────────────────────────────────

class StudentMetricsRequest(BaseModel):
    """Raw metrics as submitted by the student form. Bounds are checked by the store."""
    name: str = Field(..., description="Student name")
    attendance: Union[int, float] = Field(..., description="Attendance percentage (0-100, whole number)")
    cgpa: float = Field(..., description="CGPA on a 10-point scale (0-10)")
    assignmentCompletion: Union[int, float] = Field(
        ..., description="Assignment completion percentage (0-100, whole number)")


class PreviewRequest(BaseModel):
    """Metrics typed so far in the form. The name is not scored and may still be empty."""
    name: Optional[str] = Field(None, description="Student name (ignored)")
    attendance: Union[int, float] = Field(..., description="Attendance percentage (0-100, whole number)")
    cgpa: float = Field(..., description="CGPA on a 10-point scale (0-10)")
    assignmentCompletion: Union[int, float] = Field(
        ..., description="Assignment completion percentage (0-100, whole number)")


class RiskPreview(BaseModel):
    dropoutProbability: int
    riskLevel: str


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": "attachment; filename={}".format(filename)}
    )


@router.post("", status_code=201)
def create_student_record(request: StudentMetricsRequest, db: Session = Depends(get_db)):
    """Create a student record. Dropout probability and risk level are derived."""
    student = create_student(
        db, request.name, request.attendance, request.cgpa, request.assignmentCompletion
    )
    return {"success": True, "data": student.to_dict()}


@router.post("/preview", response_model=RiskPreview)
def preview_risk(request: PreviewRequest):
    """Score form input with the same risk model used on save, without persisting."""
    attendance, cgpa, assignment_completion = validate_scores(
        request.attendance, request.cgpa, request.assignmentCompletion)
    result = risk_model.score(attendance, cgpa, assignment_completion)
    return RiskPreview(dropoutProbability=result.probability, riskLevel=result.tier.value)


@router.get("")
def list_student_records(
    search: Optional[str] = Query(None, description="Case-insensitive name search"),
    risk_level: str = Query(report_aggregator.ALL_TIERS, description="All, Low, Medium or High"),
    sort: SortKey = Query(SortKey.CREATED_AT, description="Column to sort by"),
    direction: SortDirection = Query(SortDirection.DESC, description="asc or desc"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Results per page"),
    db: Session = Depends(get_db)
):
    """List students with search, risk filter, sorting and pagination."""
    start_time = time.time()

    snapshot = list_students(db)
    view = report_aggregator.build_report_view(
        snapshot,
        search_term=search,
        tier_filter=risk_level,
        sort_key=sort,
        direction=direction,
        page_index=page - 1,
        page_size=per_page,
    )

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Listed {} students (page {}, matching {}, total {})".format(
            len(view.items), page, view.total_matching, view.summary.total),
        extra_data={"duration_ms": round(duration_ms, 2)})

    return {
        "success": True,
        "count": len(view.items),
        "data": [s.to_dict() for s in view.items],
        "summary": view.summary.to_dict(),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": view.total_matching,
            "total_pages": view.total_pages
        }
    }


@router.get("/summary")
def get_summary(db: Session = Depends(get_db)):
    """Total students and counts per risk level."""
    summary = report_aggregator.summarize(list_students(db))
    return {"success": True, "data": summary.to_dict()}


@router.get("/report/pdf")
def download_pdf_report(db: Session = Depends(get_db)):
    """Full risk-ordered PDF report with a summary block."""
    start_time = time.time()

    snapshot = list_students(db)
    rows = report_aggregator.to_export_rows(snapshot)
    pdf_bytes = render_pdf_report(rows, report_aggregator.summarize(snapshot))

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(reports_logger, "INFO",
        "PDF report generated: {} students, {} bytes".format(len(rows), len(pdf_bytes)),
        extra_data={"duration_ms": round(duration_ms, 2)})

    return _attachment(pdf_bytes, "application/pdf", PDF_FILENAME)


@router.get("/report/excel")
def download_excel_report(db: Session = Depends(get_db)):
    """Full risk-ordered Excel report."""
    start_time = time.time()

    rows = report_aggregator.to_spreadsheet_rows(list_students(db))
    xlsx_bytes = render_excel_report(rows)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(reports_logger, "INFO",
        "Excel report generated: {} students, {} bytes".format(len(rows), len(xlsx_bytes)),
        extra_data={"duration_ms": round(duration_ms, 2)})

    return _attachment(xlsx_bytes, EXCEL_MEDIA_TYPE, EXCEL_FILENAME)
