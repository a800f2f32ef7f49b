import logging

import pytest

from reserveguard.advisory import (
    FALLBACK_LABEL,
    Reasoning,
    TemplateReasoner,
    explain_safely,
    fallback_reasoning,
)
from reserveguard.engine import ComplianceEngine
from reserveguard.pipelines.scenarios import build_scenario
from reserveguard.rules_engine.models import ComplianceStatus


@pytest.fixture
def evaluate(now):
    def _evaluate(scenario):
        reserves, liabilities = build_scenario(scenario, now=now)
        return ComplianceEngine().evaluate(reserves, liabilities, now=now)

    return _evaluate


class _ExplodingAdapter:
    def explain(self, result):
        raise TimeoutError("model endpoint unreachable")


class _WrongTypeAdapter:
    def explain(self, result):
        return "looks fine to me"


def test_template_reasoner_healthy(evaluate):
    reasoning = TemplateReasoner().explain(evaluate("healthy"))
    assert reasoning.confidence == "HIGH"
    assert reasoning.summary.startswith("Assessment: COMPLIANT.")
    assert reasoning.remediation == ()
    assert all(a.severity == "INFO" for a in reasoning.control_analysis)


def test_template_reasoner_flags_failures(evaluate):
    reasoning = TemplateReasoner().explain(evaluate("non_compliant"))
    assert "NON-COMPLIANT" in reasoning.summary
    assert "3 of 4 controls flagged" in reasoning.summary
    assert "Halt new issuance immediately." in reasoning.remediation
    assert len(reasoning.remediation) == len(set(reasoning.remediation))
    rendered = reasoning.render()
    assert "--- Recommended Actions ---" in rendered
    assert "[CRITICAL] RESERVE_RATIO" in rendered


def test_template_reasoner_without_remediation(evaluate):
    reasoning = TemplateReasoner(include_remediation=False).explain(evaluate("non_compliant"))
    assert reasoning.remediation == ()


def test_failing_adapter_falls_back(evaluate, caplog):
    result = evaluate("non_compliant")
    with caplog.at_level(logging.WARNING, logger="reserveguard.audit"):
        reasoning = explain_safely(_ExplodingAdapter(), result)

    assert reasoning.confidence == "LOW"
    assert reasoning.summary.startswith(FALLBACK_LABEL)
    assert "RED" in reasoning.summary
    assert any(getattr(r, "extra_fields", {}).get("event_type") == "ADVISORY_FALLBACK" for r in caplog.records)


def test_adapter_returning_wrong_type_falls_back(evaluate):
    reasoning = explain_safely(_WrongTypeAdapter(), evaluate("healthy"))
    assert reasoning.confidence == "LOW"


def test_no_adapter_uses_fallback(evaluate):
    reasoning = explain_safely(None, evaluate("at_risk"))
    assert reasoning.confidence == "LOW"
    assert reasoning.summary == f"{FALLBACK_LABEL} Compliance status: RED. 4 controls evaluated."
    assert reasoning.control_analysis[0].severity == "WARNING"


def test_advisory_cannot_alter_the_result(evaluate):
    result = evaluate("non_compliant")
    before = result.model_dump()
    reasoning = explain_safely(TemplateReasoner(), result)
    assert isinstance(reasoning, Reasoning)
    assert result.model_dump() == before
    assert result.overall_status == ComplianceStatus.RED
