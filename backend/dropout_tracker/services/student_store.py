"""
Student Record Store - creates and lists persisted student records.

create_student is the single write path:
1. Validate and normalize the raw metrics (field-level ValidationError)
2. Score them with the risk model (explicit call, no ORM hook)
3. Insert the record with its derived fields and commit

There are no update or delete operations; records are append-only.
"""

import math
import time
import uuid
from datetime import datetime, timezone
from typing import List, NamedTuple, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dropout_tracker.errors import ValidationError, StoreError
from dropout_tracker.models.student import Student
from dropout_tracker.services import risk_model
from dropout_tracker.logging_config import get_logger, log_with_context

logger = get_logger("db")
risk_logger = get_logger("risk")


class StudentMetrics(NamedTuple):
    name: str
    attendance: int
    cgpa: float
    assignment_completion: int


def _require_percentage(field: str, value) -> int:
    """Whole-number percentage in [0, 100]. Accepts 85 and 85.0, not 85.5."""
    if value is None:
        raise ValidationError(field, "is required")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field, "must be a number")
    if isinstance(value, float) and (math.isnan(value) or not value.is_integer()):
        raise ValidationError(field, "{} is not an integer percentage".format(value))
    if not 0 <= value <= 100:
        raise ValidationError(field, "must be between 0 and 100, got {}".format(value))
    return int(value)


def _require_cgpa(value) -> float:
    if value is None:
        raise ValidationError("cgpa", "is required")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("cgpa", "must be a number")
    if math.isnan(value) or not 0 <= value <= 10:
        raise ValidationError("cgpa", "must be between 0 and 10, got {}".format(value))
    return float(value)


def validate_scores(attendance, cgpa, assignment_completion) -> Tuple[int, float, int]:
    """
    Check only the three scored metrics. Used directly by the live preview,
    where the form may not have a name yet.

    Raises:
        ValidationError naming the first offending field
    """
    return (
        _require_percentage("attendance", attendance),
        _require_cgpa(cgpa),
        _require_percentage("assignmentCompletion", assignment_completion),
    )


def validate_metrics(name, attendance, cgpa, assignment_completion) -> StudentMetrics:
    """
    Check raw input against the declared bounds before it reaches the risk model.

    Raises:
        ValidationError naming the first offending field
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name", "is required")

    return StudentMetrics(name.strip(), *validate_scores(attendance, cgpa, assignment_completion))


def create_student(db: Session, name, attendance, cgpa, assignment_completion) -> Student:
    """
    Validate, score and persist a new student record.

    Args:
        db: Database session
        name: Student name (non-empty)
        attendance: Attendance percentage, integer 0-100
        cgpa: CGPA, 0-10
        assignment_completion: Assignment completion percentage, integer 0-100

    Returns:
        The committed Student with dropout_probability and risk_level set

    Raises:
        ValidationError: input outside declared bounds
        StoreError: the database rejected the insert
    """
    start_time = time.time()

    metrics = validate_metrics(name, attendance, cgpa, assignment_completion)
    result = risk_model.score(metrics.attendance, metrics.cgpa, metrics.assignment_completion)

    student = Student(
        id=str(uuid.uuid4()),
        name=metrics.name,
        attendance=metrics.attendance,
        cgpa=metrics.cgpa,
        assignment_completion=metrics.assignment_completion,
        dropout_probability=result.probability,
        risk_level=result.tier.value,
        created_at=datetime.now(timezone.utc),
    )

    try:
        db.add(student)
        db.commit()
        db.refresh(student)
    except SQLAlchemyError as e:
        db.rollback()
        log_with_context(logger, "ERROR", "Failed to create student: {}".format(str(e)),
                         extra_data={"name": metrics.name})
        raise StoreError("Error creating student record", str(e)) from e

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(risk_logger, "INFO",
        "Student scored: {} (attendance={}, cgpa={:.2f}, assignments={}) → {}% {}".format(
            student.name, student.attendance, student.cgpa, student.assignment_completion,
            student.dropout_probability, student.risk_level),
        context={"student_id": str(student.id)},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "dropout_probability": student.dropout_probability,
            "risk_level": student.risk_level
        })

    return student


def list_students(db: Session, newest_first: bool = True) -> List[Student]:
    """
    Return every student record. Newest first by default; the report
    aggregator imposes any other order.

    Raises:
        StoreError: the query failed
    """
    order = Student.created_at.desc() if newest_first else Student.created_at.asc()
    try:
        students = db.query(Student).order_by(order).all()
    except SQLAlchemyError as e:
        log_with_context(logger, "ERROR", "Failed to fetch students: {}".format(str(e)))
        raise StoreError("Error fetching student records", str(e)) from e

    log_with_context(logger, "DEBUG", "Fetched {} student records".format(len(students)))
    return students
