# healthcheck/services/__init__.py
from .assessment_store import AssessmentStore
from .chat_session import ChatSessionController, SessionBusyError

__all__ = ["AssessmentStore", "ChatSessionController", "SessionBusyError"]
