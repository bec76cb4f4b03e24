# healthcheck/models.py
from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    JSON,
    String,
    DateTime,
    Text,
    CheckConstraint,
    Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from healthcheck.db import Base


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SymptomAssessment(Base):
    """
    One archived symptom check: the intake, the LLM assessment and the
    chat transcript as it stood when the assessment was produced.
    """
    __tablename__ = "symptom_assessments"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=generate_uuid
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    primary_complaint: Mapped[str] = mapped_column(Text, nullable=False)
    symptoms: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    duration: Mapped[str] = mapped_column(Text, nullable=False, default="")
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    age_range: Mapped[str] = mapped_column(String(32), nullable=False, default="adult")

    possible_conditions: Mapped[list] = mapped_column(
        JSONType, nullable=False, default=list
    )
    recommendations: Mapped[list] = mapped_column(
        JSONType, nullable=False, default=list
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    chat_history: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    __table_args__ = (
        CheckConstraint(
            "severity IN ('mild', 'moderate', 'severe', 'emergency')",
            name="ck_symptom_assessments_severity_valid",
        ),
        Index("ix_symptom_assessments_created", "created_at"),
    )
