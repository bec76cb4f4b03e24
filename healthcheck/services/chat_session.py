# healthcheck/services/chat_session.py
from __future__ import annotations

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from typing import Callable, Optional, Tuple

from healthcheck.chat.agent import SymptomChatAgent, Transition
from healthcheck.chat.assessment import AssessmentServiceError, generate_assessment
from healthcheck.chat.schema import AssessmentRecord
from healthcheck.chat.state import ChatMessage, ChatState, IntakeRecord
from healthcheck.chat.steps import ChatStep
from healthcheck.config import get_settings
from healthcheck.llm import LLMClient
from healthcheck.services.assessment_store import AssessmentStore

logger = logging.getLogger(__name__)


class SessionBusyError(RuntimeError):
    """
    Input arrived while the previous reply or assessment was still running.
    """


class ChatSessionController:
    """
    Drives one symptom-check conversation:
      - appends user and bot messages to the transcript
      - feeds answers through the SymptomChatAgent
      - paces bot messages behind a "typing" indicator
      - generates, holds and archives the assessment
    """

    def __init__(
        self,
        llm_client: LLMClient,
        store: AssessmentStore,
        agent: Optional[SymptomChatAgent] = None,
        sleep: Optional[Callable[[float], None]] = None,
        typing_delay_ms: Optional[int] = None,
        temperature: Optional[float] = None,
        session_id: Optional[str] = None,
    ):
        settings = get_settings()

        self.session_id = session_id or str(uuid.uuid4())
        self.llm_client = llm_client
        self.store = store
        self.agent = agent or SymptomChatAgent()
        self._sleep = sleep or time.sleep
        self.typing_delay_ms = (
            settings.typing_delay_ms if typing_delay_ms is None else typing_delay_ms
        )
        self.temperature = settings.llm_temperature if temperature is None else temperature

        self._lock = threading.Lock()
        self._state = ChatState(transcript=[ChatMessage("bot", self.agent.WELCOME)])

    # ------------------------------------------------------------------
    # Read-only view state
    # ------------------------------------------------------------------

    @property
    def current_step(self) -> ChatStep:
        return self._state.step

    @property
    def intake(self) -> IntakeRecord:
        return self._state.intake

    @property
    def transcript(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._state.transcript)

    @property
    def quick_replies(self) -> Tuple[str, ...]:
        return tuple(self._state.quick_replies)

    @property
    def is_typing(self) -> bool:
        return self._state.is_typing

    @property
    def latest_assessment(self) -> Optional[AssessmentRecord]:
        return self._state.latest_assessment

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit_user_input(self, text: str) -> bool:
        """
        Handle free text typed by the user.

        Returns False (and does nothing) for empty or whitespace-only input.
        """
        answer = (text or "").strip()
        if not answer:
            return False

        with self._exclusive():
            self._handle_answer(answer)
        return True

    def select_quick_reply(self, reply: str) -> bool:
        """
        Handle a tapped quick reply. "Start new check" after an assessment
        restarts the conversation.
        """
        answer = (reply or "").strip()
        if not answer:
            return False

        with self._exclusive():
            if self.agent.is_restart_request(self._state.step, answer):
                self._reset()
            else:
                self._handle_answer(answer)
        return True

    def reset_session(self) -> None:
        with self._exclusive():
            self._reset()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _exclusive(self):
        # No input queue: a second answer against the same step would
        # corrupt the intake, so it is refused outright.
        if not self._lock.acquire(blocking=False):
            raise SessionBusyError(f"Session {self.session_id} is still replying")
        try:
            yield
        finally:
            self._lock.release()

    def _reset(self) -> None:
        self._state = ChatState(transcript=[ChatMessage("bot", self.agent.RESTART)])
        logger.info("Session %s reset", self.session_id)

    def _append(self, role: str, text: str) -> None:
        self._state.transcript.append(ChatMessage(role, text))

    def _deliver_bot_message(self, text: str) -> None:
        # The message only appears once the typing pause is over.
        self._state.is_typing = True
        try:
            self._sleep(self.typing_delay_ms / 1000)
        finally:
            self._state.is_typing = False
        self._append("bot", text)

    def _handle_answer(self, answer: str) -> None:
        step = self._state.step
        self._state.quick_replies = []
        self._append("user", answer)

        transition: Transition = self.agent.transition(step, self._state.intake, answer)
        self._state.intake = transition.intake

        for message in transition.bot_messages:
            self._deliver_bot_message(message)

        if transition.request_assessment:
            self._run_assessment(next_step=transition.step)
            return

        self._state.step = transition.step
        self._state.quick_replies = list(transition.quick_replies)
        logger.debug("Session %s: %s -> %s", self.session_id, step.value, transition.step.value)

    def _run_assessment(self, next_step: ChatStep) -> None:
        self._state.is_typing = True
        try:
            record = generate_assessment(
                self._state.intake,
                self._state.transcript,
                self.llm_client,
                temperature=self.temperature,
            )
        except AssessmentServiceError as e:
            # No retry and no fallback assessment.
            logger.warning("Session %s: assessment failed: %s", self.session_id, e)
            record = None
        finally:
            self._state.is_typing = False

        if record is None:
            self._deliver_bot_message(self.agent.ASSESSMENT_FAILED)
            return

        try:
            record = record.model_copy(update={"id": self.store.append(record)})
        except Exception:
            # Archiving is best effort.
            logger.exception("Session %s: failed to save assessment", self.session_id)

        self._state.latest_assessment = record
        self._deliver_bot_message(self.agent.ASSESSMENT_COMPLETE)
        self._state.step = next_step
        self._state.quick_replies = list(self.agent.AFTER_ASSESSMENT_OPTIONS)
        logger.info(
            "Session %s: assessment complete (severity=%s, id=%s)",
            self.session_id,
            record.severity.value,
            record.id,
        )
