# healthcheck/chat/agent.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Tuple

from healthcheck.chat.state import IntakeRecord
from healthcheck.chat.steps import ChatStep, Severity


def map_severity(answer: str) -> Severity:
    """
    Turn a severity quick reply such as "7-8 (Severe)" into a Severity.

    Anything that doesn't mention one of the known bands counts as mild.
    """
    if "4-6" in answer:
        return Severity.MODERATE
    if "7-8" in answer:
        return Severity.SEVERE
    if "9-10" in answer:
        return Severity.EMERGENCY
    return Severity.MILD


@dataclass(frozen=True)
class Transition:
    """
    Outcome of feeding one user answer to the current step.
    """

    step: ChatStep
    intake: IntakeRecord
    bot_messages: Tuple[str, ...] = ()
    quick_replies: Tuple[str, ...] = ()
    # Set when the intake is finished and an assessment should be generated
    request_assessment: bool = False


class SymptomChatAgent:
    """
    SymptomChatAgent scripts the symptom-check conversation.

    Steps:
      - greeting (primary complaint)
      - duration
      - severity
      - additional symptoms
      - complete

    Each step is a pure function of (intake, answer) -> Transition, so the
    agent never sleeps, calls the LLM or touches the database itself.
    """

    WELCOME = (
        "Hello! I'm HealthCheck AI, your symptom assessment assistant. "
        "I'll ask you some questions about your symptoms to provide general guidance. "
        "Remember, this is not a substitute for professional medical advice. "
        "What's your main concern or symptom today?"
    )
    RESTART = "Let's start fresh! What's your main concern or symptom today?"

    ASK_DURATION = (
        "Thank you for sharing that. Can you tell me how long you've been "
        "experiencing this symptom?"
    )
    ASK_SEVERITY = (
        "On a scale of 1-10, how would you rate the severity of your symptoms, "
        "where 1 is very mild and 10 is extremely severe?"
    )
    EMERGENCY_WARNING = (
        "⚠️ Based on your severity rating, you should seek immediate medical "
        "attention. Please call emergency services (911) or go to the nearest "
        "emergency room right away. The assessment below is for additional "
        "information only."
    )
    ASK_ADDITIONAL_SYMPTOMS = (
        "Could you describe any additional symptoms you're experiencing? "
        "This will help me provide a more accurate assessment."
    )
    ALREADY_ASSESSED = (
        "I've already provided your assessment above. Would you like to start a "
        "new symptom check or do you have questions about the results?"
    )
    EMERGENCY_CONTACTS = (
        "\U0001f6a8 Emergency: call 911 (or your local emergency number). "
        "\U0001f3e5 For urgent symptoms, go to the nearest emergency room. "
        "For non-urgent questions, contact your doctor or a nurse advice line."
    )
    DISCLAIMER = (
        "Medical Disclaimer: This assessment is for informational purposes only "
        "and should not replace professional medical advice, diagnosis, or "
        "treatment. Always consult a qualified healthcare provider."
    )

    ASSESSMENT_COMPLETE = (
        "I've completed your symptom assessment. Please review the results below "
        "and remember to consult with a healthcare professional for proper "
        "diagnosis and treatment."
    )
    ASSESSMENT_FAILED = (
        "I apologize, but I'm having trouble processing your symptoms right now. "
        "For your safety, please consider contacting a healthcare provider directly "
        "or calling emergency services if you have serious symptoms."
    )

    # Quick replies
    START_NEW_CHECK = "Start new check"
    SAVE_ASSESSMENT = "Save this assessment"
    SHOW_EMERGENCY_CONTACTS = "Emergency contacts"
    SHOW_DISCLAIMER = "Medical disclaimer"

    DURATION_OPTIONS: Tuple[str, ...] = (
        "A few hours",
        "1-2 days",
        "A week",
        "More than a week",
        "Several weeks",
    )
    SEVERITY_OPTIONS: Tuple[str, ...] = (
        "1-3 (Mild)",
        "4-6 (Moderate)",
        "7-8 (Severe)",
        "9-10 (Emergency)",
    )
    META_OPTIONS: Tuple[str, ...] = (
        START_NEW_CHECK,
        SHOW_EMERGENCY_CONTACTS,
        SHOW_DISCLAIMER,
    )
    AFTER_ASSESSMENT_OPTIONS: Tuple[str, ...] = (
        START_NEW_CHECK,
        SAVE_ASSESSMENT,
        SHOW_EMERGENCY_CONTACTS,
    )

    def __init__(self) -> None:
        self._handlers: Dict[ChatStep, Callable[[IntakeRecord, str], Transition]] = {
            ChatStep.GREETING: self._on_greeting,
            ChatStep.DURATION: self._on_duration,
            ChatStep.SEVERITY: self._on_severity,
            ChatStep.ADDITIONAL_SYMPTOMS: self._on_additional_symptoms,
            ChatStep.COMPLETE: self._on_complete,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def transition(self, step: ChatStep, intake: IntakeRecord, answer: str) -> Transition:
        """
        Apply a (trimmed, non-empty) user answer to the given step.
        """
        return self._handlers[step](intake, answer)

    def is_restart_request(self, step: ChatStep, reply: str) -> bool:
        return step == ChatStep.COMPLETE and _same_option(reply, self.START_NEW_CHECK)

    # ------------------------------------------------------------------
    # Step handlers
    # ------------------------------------------------------------------

    def _on_greeting(self, intake: IntakeRecord, answer: str) -> Transition:
        return Transition(
            step=ChatStep.DURATION,
            intake=replace(intake, primary_complaint=answer),
            bot_messages=(self.ASK_DURATION,),
            quick_replies=self.DURATION_OPTIONS,
        )

    def _on_duration(self, intake: IntakeRecord, answer: str) -> Transition:
        return Transition(
            step=ChatStep.SEVERITY,
            intake=replace(intake, duration=answer),
            bot_messages=(self.ASK_SEVERITY,),
            quick_replies=self.SEVERITY_OPTIONS,
        )

    def _on_severity(self, intake: IntakeRecord, answer: str) -> Transition:
        severity = map_severity(answer)

        messages: List[str] = []
        if severity == Severity.EMERGENCY:
            messages.append(self.EMERGENCY_WARNING)
        messages.append(self.ASK_ADDITIONAL_SYMPTOMS)

        return Transition(
            step=ChatStep.ADDITIONAL_SYMPTOMS,
            intake=replace(intake, severity=severity),
            bot_messages=tuple(messages),
        )

    def _on_additional_symptoms(self, intake: IntakeRecord, answer: str) -> Transition:
        # Rebuilt rather than appended, so a second attempt after a failed
        # assessment doesn't stack answers.
        symptoms = tuple(s for s in (intake.primary_complaint, answer) if s)
        return Transition(
            step=ChatStep.COMPLETE,
            intake=replace(intake, symptoms=symptoms),
            request_assessment=True,
        )

    def _on_complete(self, intake: IntakeRecord, answer: str) -> Transition:
        if _same_option(answer, self.SHOW_EMERGENCY_CONTACTS):
            reply = self.EMERGENCY_CONTACTS
        elif _same_option(answer, self.SHOW_DISCLAIMER):
            reply = self.DISCLAIMER
        else:
            reply = self.ALREADY_ASSESSED

        return Transition(
            step=ChatStep.COMPLETE,
            intake=intake,
            bot_messages=(reply,),
            quick_replies=self.META_OPTIONS,
        )


def _same_option(answer: str, option: str) -> bool:
    return answer.strip().casefold() == option.casefold()
