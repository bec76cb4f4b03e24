# healthcheck/chat/assessment.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from healthcheck.chat.schema import AssessmentRecord, AssessmentResult
from healthcheck.chat.state import ChatMessage, IntakeRecord
from healthcheck.llm import LLMClient

logger = logging.getLogger(__name__)


class AssessmentServiceError(Exception):
    """
    The LLM could not produce a usable assessment (network, provider,
    parse or validation error).
    """


# Shape the LLM must answer with.
ASSESSMENT_RESPONSE_SCHEMA: Dict = {
    "type": "object",
    "properties": {
        "possible_conditions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "condition": {"type": "string"},
                    "confidence": {"type": "string", "enum": ["high", "medium", "low"]},
                    "description": {"type": "string"},
                },
                "required": ["condition", "confidence", "description"],
            },
        },
        "recommendations": {
            "type": "array",
            "items": {"type": "string"},
        },
        "notes": {"type": "string"},
    },
    "required": ["possible_conditions", "recommendations", "notes"],
}


SYSTEM_PROMPT = (
    "You are a medical AI assistant providing general symptom assessment. "
    "You never give a diagnosis and you always output strictly formatted JSON."
)


def build_assessment_prompt(intake: IntakeRecord) -> str:
    """
    Build the user prompt for one finished intake.
    """
    severity = intake.severity.value if intake.severity else "unknown"
    return (
        "Based on the following information, provide a JSON assessment:\n\n"
        f"Primary symptoms: {', '.join(intake.symptoms)}\n"
        f"Duration: {intake.duration}\n"
        f"Severity: {severity}\n"
        f"Age range: {intake.age_range}\n\n"
        "Please provide:\n"
        "1. Up to 3 possible conditions that could match these symptoms "
        "(with confidence levels)\n"
        "2. Appropriate recommendations for next steps\n"
        "3. Any red flags that require immediate attention\n\n"
        "Format your response as a single JSON object matching this JSON schema:\n"
        f"{json.dumps(ASSESSMENT_RESPONSE_SCHEMA, indent=2)}\n\n"
        "Remember to:\n"
        "- Be conservative in assessments\n"
        "- Always recommend consulting healthcare professionals\n"
        "- Identify serious symptoms that need immediate attention\n"
        "- Provide helpful but general guidance only\n\n"
        "Return ONLY the JSON object, with no additional commentary."
    )


def _clean_json_from_llm(raw: str) -> dict:
    """
    Try to robustly parse JSON from the LLM response.
    Handles cases where the model wraps it in ```json ... ``` fences.
    """
    text = raw.strip()

    if text.startswith("```"):
        text = text.lstrip("`")
        if text.lower().startswith("json"):
            text = text[4:]
        text = text.rstrip("`").strip()

    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def request_assessment(
    intake: IntakeRecord,
    llm_client: LLMClient,
    temperature: float = 0.2,
) -> AssessmentResult:
    """
    Ask the LLM for an assessment of a finished intake.

    Raises AssessmentServiceError on any failure; there is no retry.
    """
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_assessment_prompt(intake)},
    ]

    try:
        raw = llm_client.chat(
            messages,
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        data = _clean_json_from_llm(raw)
        return AssessmentResult.model_validate(data)
    except (ValueError, ValidationError) as e:
        # json.JSONDecodeError is a ValueError
        raise AssessmentServiceError(f"Unusable assessment from LLM: {e}") from e
    except Exception as e:
        raise AssessmentServiceError(f"LLM call failed: {e}") from e


def build_assessment_record(
    intake: IntakeRecord,
    result: AssessmentResult,
    transcript: Sequence[ChatMessage],
    created_at: Optional[datetime] = None,
) -> AssessmentRecord:
    if intake.severity is None:
        raise ValueError("Cannot build an assessment record before severity is known")

    return AssessmentRecord(
        created_at=created_at or datetime.now(timezone.utc),
        primary_complaint=intake.primary_complaint,
        symptoms=list(intake.symptoms),
        duration=intake.duration,
        severity=intake.severity,
        age_range=intake.age_range,
        possible_conditions=result.possible_conditions,
        recommendations=result.recommendations,
        notes=result.notes,
        chat_history=list(transcript),
    )


def generate_assessment(
    intake: IntakeRecord,
    transcript: Sequence[ChatMessage],
    llm_client: LLMClient,
    temperature: float = 0.2,
) -> AssessmentRecord:
    """
    Turn a finished intake into an AssessmentRecord (not yet persisted).
    """
    result = request_assessment(intake, llm_client, temperature=temperature)
    logger.info(
        "Assessment generated: %d condition(s), %d recommendation(s)",
        len(result.possible_conditions),
        len(result.recommendations),
    )
    snapshot: List[ChatMessage] = list(transcript)
    return build_assessment_record(intake, result, snapshot)
