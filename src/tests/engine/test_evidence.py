import json

from reserveguard.audit import AuditLedger
from reserveguard.engine import ComplianceEngine
from reserveguard.evidence import build_evidence, commit, evidence_hash, input_hash
from reserveguard.hashing import canonicalize, content_hash
from reserveguard.rules_engine.models import CONTROL_ORDER


SECRETS = ("105000000", "100000000", "63000000", "42000000", "Zephyr Treasury Fund", "Kestrel Bond Ladder", "ZTFQ", "KBLX")


def test_canonical_json_is_order_independent():
    assert canonicalize({"b": 1, "a": [1, 2]}) == b'{"a":[1,2],"b":1}'
    assert content_hash({"b": 1, "a": 2}) == content_hash({"a": 2, "b": 1})


def test_evidence_payload_holds_only_digests_and_statuses(reserves_payload, liabilities_payload, now):
    result = ComplianceEngine().evaluate(reserves_payload, liabilities_payload, now=now)
    from reserveguard.validation import validate_evaluation_input

    reserves, liabilities, policy = validate_evaluation_input(
        reserves_payload, liabilities_payload, ComplianceEngine().policy
    )
    payload = build_evidence(
        reserves=reserves,
        liabilities=liabilities,
        controls=result.controls,
        evaluation_timestamp=now,
        policy_version=policy.version,
    )

    assert evidence_hash(payload) == result.evidence_hash
    dumped = payload.canonical_dict()
    assert set(dumped) == {
        "reserveCommitment",
        "liabilityCommitment",
        "controlStatuses",
        "evaluationTimestamp",
        "policyVersion",
    }
    assert dumped["reserveCommitment"] == commit(reserves)
    assert [s["type"] for s in dumped["controlStatuses"]] == [ct.value for ct in CONTROL_ORDER]

    text = canonicalize(dumped).decode("utf-8")
    for secret in SECRETS + ("60.0", "40.0"):
        assert secret not in text


def test_published_artifacts_do_not_leak_inputs(reserves_payload, liabilities_payload, now):
    ledger = AuditLedger()
    engine = ComplianceEngine(ledger=ledger)
    engine.evaluate(reserves_payload, liabilities_payload, now=now)

    published = [
        ledger.export_json_str(),
        json.dumps([r.model_dump(mode="json", by_alias=True) for r in engine.history()]),
    ]
    for text in published:
        for secret in SECRETS:
            assert secret not in text


def test_commitments_are_sensitive_to_any_field(make_reserves, make_liabilities):
    base = make_reserves()
    moved = make_reserves(total_value="105000000.01")
    assert commit(base) != commit(moved)
    assert input_hash(base, make_liabilities()) != input_hash(moved, make_liabilities())
