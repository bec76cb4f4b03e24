# healthcheck/api/schemas.py
from __future__ import annotations

from typing import Optional, List

from pydantic import BaseModel

from healthcheck.chat.schema import AssessmentRecord
from healthcheck.chat.state import ChatMessage, IntakeRecord
from healthcheck.chat.steps import ChatStep


class UserMessageRequest(BaseModel):
    text: str


class QuickReplyRequest(BaseModel):
    reply: str


class SessionStateResponse(BaseModel):
    """
    Everything the chat view needs to render one session.
    """

    session_id: str
    current_step: ChatStep
    transcript: List[ChatMessage]
    quick_replies: List[str]
    is_typing: bool
    intake: IntakeRecord
    latest_assessment: Optional[AssessmentRecord] = None


class AssessmentResponse(AssessmentRecord):
    pass
