# healthcheck/chat/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional, Tuple

from healthcheck.chat.steps import ChatStep, Severity

if TYPE_CHECKING:
    from healthcheck.chat.schema import AssessmentRecord


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "bot" or "user"
    text: str
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class IntakeRecord:
    """
    What we know about the user's complaint so far.

    Every field is set once per session, except `symptoms`, which is
    rebuilt from the primary complaint and the additional-symptoms answer.
    """

    primary_complaint: str = ""
    symptoms: Tuple[str, ...] = ()
    duration: str = ""
    severity: Optional[Severity] = None
    # Not asked for yet; every check is assessed as an adult
    age_range: str = "adult"


@dataclass
class ChatState:
    """
    In-memory state of one symptom-check conversation.
    """

    step: ChatStep = ChatStep.GREETING
    intake: IntakeRecord = field(default_factory=IntakeRecord)
    transcript: List[ChatMessage] = field(default_factory=list)
    quick_replies: List[str] = field(default_factory=list)
    is_typing: bool = False
    latest_assessment: Optional[AssessmentRecord] = None
