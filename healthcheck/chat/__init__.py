# healthcheck/chat/__init__.py
from .steps import ChatStep, Severity
from .state import ChatMessage, IntakeRecord, ChatState
from .schema import AssessmentRecord, AssessmentResult, Confidence, PossibleCondition

__all__ = [
    "ChatStep",
    "Severity",
    "ChatMessage",
    "IntakeRecord",
    "ChatState",
    "AssessmentRecord",
    "AssessmentResult",
    "Confidence",
    "PossibleCondition",
]
