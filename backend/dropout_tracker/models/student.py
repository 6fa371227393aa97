"""
Student model - one academic snapshot per student with its derived risk.

The three raw metrics (attendance, cgpa, assignment_completion) are fixed
at creation. dropout_probability and risk_level are derived from them by
the risk model inside the record store's create operation and are never
written anywhere else.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, String, Integer, Float, CheckConstraint, Index
from dropout_tracker.database import Base


class Student(Base):
    """
    SQLAlchemy model for the students table.

    Bounds on the raw and derived metrics are enforced both by the record
    store before insert and by CHECK constraints in the database.
    """
    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("attendance >= 0 AND attendance <= 100", name="ck_students_attendance"),
        CheckConstraint("cgpa >= 0 AND cgpa <= 10", name="ck_students_cgpa"),
        CheckConstraint("assignment_completion >= 0 AND assignment_completion <= 100",
                        name="ck_students_assignment_completion"),
        CheckConstraint("dropout_probability >= 0 AND dropout_probability <= 100",
                        name="ck_students_dropout_probability"),
        CheckConstraint("risk_level IN ('Low', 'Medium', 'High')", name="ck_students_risk_level"),
        Index("idx_students_created_at", "created_at"),
        Index("idx_students_dropout_probability", "dropout_probability"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique student identifier")
    name = Column(Text, nullable=False,
                  doc="Student's name, trimmed")
    attendance = Column(Integer, nullable=False,
                        doc="Attendance percentage (0-100)")
    cgpa = Column(Float, nullable=False,
                  doc="Cumulative grade point average on a 10-point scale")
    assignment_completion = Column(Integer, nullable=False,
                                   doc="Assignment completion percentage (0-100)")
    dropout_probability = Column(Integer, nullable=False,
                                 doc="Derived dropout probability percentage (0-100)")
    risk_level = Column(String(10), nullable=False, default="Low",
                        doc="Derived risk tier: Low, Medium or High")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        doc="Timestamp when the record was created")

    def to_dict(self) -> dict:
        """Serialize to the JSON shape consumed by the dashboard."""
        return {
            "id": str(self.id),
            "_id": str(self.id),
            "name": self.name,
            "attendance": self.attendance,
            "cgpa": self.cgpa,
            "assignmentCompletion": self.assignment_completion,
            "dropoutProbability": self.dropout_probability,
            "riskLevel": self.risk_level,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return (f"<Student(id={self.id}, name='{self.name}', "
                f"probability={self.dropout_probability}, risk='{self.risk_level}')>")
