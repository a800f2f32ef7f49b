import pytest

from reserveguard.engine import ComplianceEngine
from reserveguard.pipelines.data_source import (
    FileDataSource,
    ScenarioDataSource,
    get_data_source,
)
from reserveguard.pipelines.scenarios import SCENARIOS, build_scenario
from reserveguard.rules_engine.config import load_policy_config
from reserveguard.rules_engine.models import ComplianceStatus, ControlType
from reserveguard.errors import ValidationError

G, Y, R = ComplianceStatus.GREEN, ComplianceStatus.YELLOW, ComplianceStatus.RED


@pytest.mark.parametrize(
    "name,overall,controls",
    [
        ("healthy", G, [G, G, G, G]),
        ("at_risk", Y, [Y, Y, G, Y]),
        ("non_compliant", R, [R, R, R, G]),
        ("stale_proof", R, [G, R, G, G]),
        ("concentrated", R, [G, G, G, R]),
    ],
)
def test_scenario_verdicts_under_their_policy(name, overall, controls, now):
    source = ScenarioDataSource(name)
    inputs = source.fetch_inputs(now=now)
    result = ComplianceEngine(load_policy_config(source.policy)).evaluate(
        inputs.reserves, inputs.liabilities, now=now
    )
    assert result.overall_status == overall
    assert [c.status for c in result.controls] == controls


def test_at_risk_breaches_under_tiered_concentration(now):
    reserves, liabilities = build_scenario("at_risk", now=now)
    result = ComplianceEngine().evaluate(reserves, liabilities, now=now)
    assert result.control(ControlType.ASSET_CONCENTRATION).status == R


def test_scenarios_are_internally_consistent(now):
    for name in SCENARIOS:
        reserves, _ = build_scenario(name, now=now)
        assert sum(a.percentage for a in reserves.assets) == pytest.approx(100.0)


def test_unknown_scenario():
    with pytest.raises(ValueError):
        ScenarioDataSource("bank_run")
    with pytest.raises(ValueError):
        get_data_source("kafka")


def test_get_data_source_defaults_to_healthy_scenario(now):
    source = get_data_source("")
    assert isinstance(source, ScenarioDataSource)
    assert source.scenario == "healthy"


def test_file_data_source_reads_camel_case_json(tmp_path, reserves_payload, liabilities_payload, now):
    import json

    reserves_path = tmp_path / "reserves.json"
    liabilities_path = tmp_path / "liabilities.json"
    reserves_path.write_text(json.dumps(reserves_payload), encoding="utf-8")
    liabilities_path.write_text(json.dumps(liabilities_payload), encoding="utf-8")

    source = get_data_source("files", reserves_path=reserves_path, liabilities_path=liabilities_path)
    assert isinstance(source, FileDataSource)
    inputs = source.fetch_inputs(now=now)
    assert len(inputs.reserves.assets) == 2
    assert inputs.liabilities.source == "issuer-ledger"


def test_file_data_source_validates(tmp_path, reserves_payload, liabilities_payload, now):
    import json

    reserves_payload["assets"][0]["riskLevel"] = "JUNK"
    reserves_path = tmp_path / "reserves.json"
    liabilities_path = tmp_path / "liabilities.json"
    reserves_path.write_text(json.dumps(reserves_payload), encoding="utf-8")
    liabilities_path.write_text(json.dumps(liabilities_payload), encoding="utf-8")

    source = FileDataSource(reserves_path=reserves_path, liabilities_path=liabilities_path)
    with pytest.raises(ValidationError) as exc:
        source.fetch_inputs(now=now)
    assert exc.value.errors[0].startswith("reserves.assets.0.riskLevel")
