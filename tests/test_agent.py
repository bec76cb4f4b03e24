"""Tests for the scripted conversation steps."""

import pytest

from healthcheck.chat.agent import SymptomChatAgent, map_severity
from healthcheck.chat.state import IntakeRecord
from healthcheck.chat.steps import ChatStep, Severity


@pytest.fixture
def agent():
    return SymptomChatAgent()


# ---------------------------------------------------------------------------
# Severity mapping
# ---------------------------------------------------------------------------

class TestMapSeverity:
    @pytest.mark.parametrize(
        "answer, expected",
        [
            ("1-3 (Mild)", Severity.MILD),
            ("4-6 (Moderate)", Severity.MODERATE),
            ("7-8 (Severe)", Severity.SEVERE),
            ("9-10 (Emergency)", Severity.EMERGENCY),
            ("about a 7-8 I think", Severity.SEVERE),
            ("pretty bad", Severity.MILD),
            ("10", Severity.MILD),
            ("", Severity.MILD),
        ],
    )
    def test_maps_quick_reply_text(self, answer, expected):
        assert map_severity(answer) == expected

    def test_first_matching_band_wins(self):
        # "4-6" is checked before "9-10"
        assert map_severity("4-6 or 9-10") == Severity.MODERATE


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

class TestGreeting:
    def test_sets_primary_complaint_and_asks_duration(self, agent):
        t = agent.transition(ChatStep.GREETING, IntakeRecord(), "headache")

        assert t.step == ChatStep.DURATION
        assert t.intake.primary_complaint == "headache"
        assert t.bot_messages == (SymptomChatAgent.ASK_DURATION,)
        assert t.quick_replies == SymptomChatAgent.DURATION_OPTIONS
        assert t.request_assessment is False

    def test_does_not_mutate_input_intake(self, agent):
        intake = IntakeRecord()
        agent.transition(ChatStep.GREETING, intake, "headache")
        assert intake.primary_complaint == ""


class TestDuration:
    def test_sets_duration_and_offers_severity_bands(self, agent):
        intake = IntakeRecord(primary_complaint="headache")
        t = agent.transition(ChatStep.DURATION, intake, "2 days")

        assert t.step == ChatStep.SEVERITY
        assert t.intake.duration == "2 days"
        assert t.bot_messages == (SymptomChatAgent.ASK_SEVERITY,)
        assert "9-10 (Emergency)" in t.quick_replies


class TestSeverity:
    @pytest.mark.parametrize(
        "answer", ["1-3 (Mild)", "4-6 (Moderate)", "7-8 (Severe)"]
    )
    def test_non_emergency_only_asks_for_more_symptoms(self, agent, answer):
        t = agent.transition(ChatStep.SEVERITY, IntakeRecord(), answer)

        assert t.step == ChatStep.ADDITIONAL_SYMPTOMS
        assert t.bot_messages == (SymptomChatAgent.ASK_ADDITIONAL_SYMPTOMS,)
        assert SymptomChatAgent.EMERGENCY_WARNING not in t.bot_messages
        assert t.quick_replies == ()

    def test_emergency_warns_first(self, agent):
        t = agent.transition(ChatStep.SEVERITY, IntakeRecord(), "9-10 (Emergency)")

        assert t.intake.severity == Severity.EMERGENCY
        assert t.bot_messages == (
            SymptomChatAgent.EMERGENCY_WARNING,
            SymptomChatAgent.ASK_ADDITIONAL_SYMPTOMS,
        )


class TestAdditionalSymptoms:
    def test_builds_symptoms_and_requests_assessment(self, agent):
        intake = IntakeRecord(primary_complaint="headache", severity=Severity.SEVERE)
        t = agent.transition(ChatStep.ADDITIONAL_SYMPTOMS, intake, "also nausea")

        assert t.intake.symptoms == ("headache", "also nausea")
        assert t.request_assessment is True
        assert t.step == ChatStep.COMPLETE
        assert t.bot_messages == ()

    def test_replaces_rather_than_appends(self, agent):
        intake = IntakeRecord(
            primary_complaint="headache",
            symptoms=("headache", "earlier answer"),
        )
        t = agent.transition(ChatStep.ADDITIONAL_SYMPTOMS, intake, "dizziness")
        assert t.intake.symptoms == ("headache", "dizziness")

    def test_empty_complaint_is_filtered(self, agent):
        t = agent.transition(ChatStep.ADDITIONAL_SYMPTOMS, IntakeRecord(), "fever")
        assert t.intake.symptoms == ("fever",)


class TestComplete:
    def test_acknowledges_and_offers_meta_actions(self, agent):
        intake = IntakeRecord(primary_complaint="headache")
        t = agent.transition(ChatStep.COMPLETE, intake, "what now?")

        assert t.step == ChatStep.COMPLETE
        assert t.intake is intake
        assert t.bot_messages == (SymptomChatAgent.ALREADY_ASSESSED,)
        assert t.quick_replies == (
            "Start new check",
            "Emergency contacts",
            "Medical disclaimer",
        )
        assert t.request_assessment is False

    def test_emergency_contacts(self, agent):
        t = agent.transition(ChatStep.COMPLETE, IntakeRecord(), "Emergency contacts")
        assert t.bot_messages == (SymptomChatAgent.EMERGENCY_CONTACTS,)

    def test_disclaimer_is_case_insensitive(self, agent):
        t = agent.transition(ChatStep.COMPLETE, IntakeRecord(), "medical DISCLAIMER")
        assert t.bot_messages == (SymptomChatAgent.DISCLAIMER,)


class TestRestartRequest:
    def test_only_after_assessment(self, agent):
        assert agent.is_restart_request(ChatStep.COMPLETE, "Start new check")
        assert not agent.is_restart_request(ChatStep.GREETING, "Start new check")
        assert not agent.is_restart_request(ChatStep.COMPLETE, "Emergency contacts")
