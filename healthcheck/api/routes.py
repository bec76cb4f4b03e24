# healthcheck/api/routes.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from healthcheck.config import get_settings
from healthcheck.llm import LLMClient, OpenAILLMClient
from healthcheck.services import AssessmentStore, ChatSessionController, SessionBusyError
from .schemas import (
    AssessmentResponse,
    QuickReplyRequest,
    SessionStateResponse,
    UserMessageRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_sessions: Dict[str, ChatSessionController] = {}

_store = AssessmentStore()


def get_store() -> AssessmentStore:
    return _store


@lru_cache(maxsize=1)
def _default_llm_client() -> LLMClient:
    return OpenAILLMClient()


def get_llm_client() -> LLMClient:
    try:
        return _default_llm_client()
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))


def _get_session(session_id: str) -> ChatSessionController:
    controller = _sessions.get(session_id)
    if controller is None:
        raise HTTPException(
            status_code=404,
            detail="Chat session not found. Start a new session.",
        )
    return controller


def _to_response(controller: ChatSessionController) -> SessionStateResponse:
    return SessionStateResponse(
        session_id=controller.session_id,
        current_step=controller.current_step,
        transcript=list(controller.transcript),
        quick_replies=list(controller.quick_replies),
        is_typing=controller.is_typing,
        intake=controller.intake,
        latest_assessment=controller.latest_assessment,
    )


# ----------------------------------------------------------------------
# Chat sessions
# ----------------------------------------------------------------------


@router.post("/sessions", response_model=SessionStateResponse)
def start_session(
    store: AssessmentStore = Depends(get_store),
    llm_client: LLMClient = Depends(get_llm_client),
) -> SessionStateResponse:
    """
    Start a new symptom check. The transcript opens with the welcome message.
    """
    controller = ChatSessionController(llm_client=llm_client, store=store)
    _sessions[controller.session_id] = controller
    logger.info("Started chat session %s", controller.session_id)
    return _to_response(controller)


@router.get("/sessions/{session_id}", response_model=SessionStateResponse)
def get_session(session_id: str) -> SessionStateResponse:
    return _to_response(_get_session(session_id))


@router.post("/sessions/{session_id}/messages", response_model=SessionStateResponse)
def post_message(session_id: str, payload: UserMessageRequest) -> SessionStateResponse:
    controller = _get_session(session_id)
    try:
        controller.submit_user_input(payload.text)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _to_response(controller)


@router.post("/sessions/{session_id}/quick-replies", response_model=SessionStateResponse)
def post_quick_reply(session_id: str, payload: QuickReplyRequest) -> SessionStateResponse:
    controller = _get_session(session_id)
    try:
        controller.select_quick_reply(payload.reply)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _to_response(controller)


@router.post("/sessions/{session_id}/reset", response_model=SessionStateResponse)
def reset_session(session_id: str) -> SessionStateResponse:
    controller = _get_session(session_id)
    try:
        controller.reset_session()
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _to_response(controller)


# ----------------------------------------------------------------------
# Assessment history
# ----------------------------------------------------------------------


@router.get("/assessments", response_model=List[AssessmentResponse])
def list_assessments(
    limit: Optional[int] = Query(None, ge=1, le=500),
    store: AssessmentStore = Depends(get_store),
) -> List[AssessmentResponse]:
    """
    Archived assessments, newest first.
    """
    records = store.list(limit=limit or get_settings().history_page_size)
    return [AssessmentResponse(**r.model_dump()) for r in records]


@router.get("/assessments/{assessment_id}", response_model=AssessmentResponse)
def get_assessment(
    assessment_id: str,
    store: AssessmentStore = Depends(get_store),
) -> AssessmentResponse:
    record = store.get(assessment_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Assessment not found.")
    return AssessmentResponse(**record.model_dump())


@router.delete("/assessments/{assessment_id}", status_code=204)
def delete_assessment(
    assessment_id: str,
    store: AssessmentStore = Depends(get_store),
) -> Response:
    if not store.delete(assessment_id):
        raise HTTPException(status_code=404, detail="Assessment not found.")
    return Response(status_code=204)
