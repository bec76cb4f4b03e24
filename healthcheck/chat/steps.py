# healthcheck/chat/steps.py
from enum import Enum


class ChatStep(str, Enum):
    GREETING = "greeting"
    DURATION = "duration"
    SEVERITY = "severity"
    ADDITIONAL_SYMPTOMS = "additional_symptoms"
    COMPLETE = "complete"


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    EMERGENCY = "emergency"
