# healthcheck/chat/schema.py
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from healthcheck.chat.state import ChatMessage
from healthcheck.chat.steps import Severity


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PossibleCondition(BaseModel):
    condition: str = Field(..., description="Condition name, e.g. 'Migraine'")
    confidence: Confidence
    description: str = ""

    model_config = ConfigDict(extra="ignore")

    @field_validator("confidence", mode="before")
    @classmethod
    def _normalise_confidence(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class AssessmentResult(BaseModel):
    """
    The structured assessment the LLM returns for one intake.
    """

    possible_conditions: List[PossibleCondition] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    notes: Optional[str] = None

    # Allow extra fields from the LLM without crashing
    model_config = ConfigDict(extra="ignore")

    @field_validator("possible_conditions", "recommendations", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return [] if value is None else value


class AssessmentRecord(BaseModel):
    """
    Intake + assessment + transcript snapshot, as archived in the store
    and shown in the history view.
    """

    id: Optional[str] = None
    created_at: datetime

    primary_complaint: str
    symptoms: List[str] = Field(default_factory=list)
    duration: str = ""
    severity: Severity
    age_range: str = "adult"

    possible_conditions: List[PossibleCondition] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    notes: Optional[str] = None

    chat_history: List[ChatMessage] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite drops the offset; every stored timestamp is UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
