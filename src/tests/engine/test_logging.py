import json
import logging

import pytest

from reserveguard.engine import ComplianceEngine
from reserveguard.errors import ValidationError
from reserveguard.logging_config import StructuredFormatter


def _events(caplog):
    return [getattr(r, "extra_fields", {}).get("event_type") for r in caplog.records]


def test_structured_formatter_emits_json_with_extra_fields():
    record = logging.LogRecord("reserveguard.audit", logging.INFO, __file__, 10, "hello %s", ("world",), None)
    record.extra_fields = {"event_type": "TEST", "evidence_hash": "ab" * 32}
    data = json.loads(StructuredFormatter().format(record))
    assert data["message"] == "hello world"
    assert data["level"] == "INFO"
    assert data["event_type"] == "TEST"
    assert data["evidence_hash"] == "ab" * 32


def test_completed_evaluation_is_logged_without_figures(make_reserves, make_liabilities, now, caplog):
    with caplog.at_level(logging.DEBUG, logger="reserveguard"):
        result = ComplianceEngine().evaluate(make_reserves(), make_liabilities(), now=now)

    assert "EVALUATION_COMPLETED" in _events(caplog)
    completed = next(r for r in caplog.records if getattr(r, "extra_fields", {}).get("event_type") == "EVALUATION_COMPLETED")
    assert completed.extra_fields["evidence_hash"] == result.evidence_hash
    formatted = "\n".join(StructuredFormatter().format(r) for r in caplog.records)
    assert "105000000" not in formatted


def test_failed_evaluation_is_logged(make_liabilities, now, caplog):
    with caplog.at_level(logging.ERROR, logger="reserveguard"):
        with pytest.raises(ValidationError):
            ComplianceEngine().evaluate({"totalValue": -1}, make_liabilities(), now=now)
    assert "EVALUATION_FAILED" in _events(caplog)
