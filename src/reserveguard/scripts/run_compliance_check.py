from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..advisory import TemplateReasoner, explain_safely
from ..anchoring import build_onchain_report
from ..audit import AuditLedger, JsonlAuditStore
from ..engine import ComplianceEngine
from ..errors import ReserveGuardError
from ..logging_config import configure_logging
from ..pipelines.data_source import FileDataSource, ScenarioDataSource
from ..pipelines.scenarios import SCENARIOS
from ..rules_engine.config import load_policy_config
from ..rules_engine.models import ComplianceResult, ComplianceStatus
from ..settings import get_settings


EXIT_CODES = {
    ComplianceStatus.GREEN: 0,
    ComplianceStatus.YELLOW: 1,
    ComplianceStatus.RED: 2,
}
EXIT_ERROR = 3


def _write_json(path: Path, payload) -> None:
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def _write_markdown(result: ComplianceResult, out_path: Path, explanation: Optional[str] = None) -> None:
    lines = [
        f"# Compliance Report {result.evaluation_timestamp.isoformat()}",
        "",
        f"Overall status: **{result.overall_status.value}**",
        f"Policy version: {result.policy_version}",
        f"Evidence hash: `{result.evidence_hash}`",
        "",
        "## Controls",
    ]
    for control in result.controls:
        lines.append("")
        lines.append(f"### {control.control_type.value}: {control.status.value}")
        lines.append(f"- {control.message}")
        if control.threshold is not None:
            lines.append(f"- Threshold: {control.threshold}")
    if explanation:
        lines.extend(["", "## Advisory explanation", "", explanation])
    out_path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _open_ledger(path: Optional[Path]) -> Optional[AuditLedger]:
    if path is None:
        return None
    return AuditLedger(JsonlAuditStore(path))


def _cmd_evaluate(args: argparse.Namespace) -> int:
    settings = get_settings()
    now = datetime.now(timezone.utc)

    if args.scenario:
        source = ScenarioDataSource(args.scenario)
        policy_source = args.policy or source.policy
    else:
        if not (args.reserves and args.liabilities):
            raise SystemExit("Provide --scenario or both --reserves and --liabilities.")
        source = FileDataSource(reserves_path=Path(args.reserves), liabilities_path=Path(args.liabilities))
        policy_source = args.policy or settings.policy

    policy = load_policy_config(policy_source)
    if settings.policy_version:
        policy = policy.with_version(settings.policy_version)

    ledger_path = Path(args.ledger) if args.ledger else settings.ledger_path
    engine = ComplianceEngine(policy, history_limit=settings.history_limit, ledger=_open_ledger(ledger_path))

    inputs = source.fetch_inputs(now=now)
    result = engine.evaluate(inputs.reserves, inputs.liabilities, now=now)
    result_json = result.model_dump(mode="json", by_alias=True)
    print(json.dumps(result_json, indent=2))

    explanation = None
    if args.explain:
        explanation = explain_safely(TemplateReasoner(), result).render()
        print()
        print(explanation)

    if args.out_dir:
        out_dir = Path(args.out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        _write_json(out_dir / "compliance_result.json", result_json)
        _write_json(out_dir / "onchain_report.json", build_onchain_report(result).to_dict())
        _write_markdown(result, out_dir / "compliance_report.md", explanation)
        print(f"Wrote {out_dir}", file=sys.stderr)

    return EXIT_CODES[result.overall_status]


def _cmd_verify_ledger(args: argparse.Namespace) -> int:
    ledger = AuditLedger(JsonlAuditStore(Path(args.ledger)))
    verification = ledger.verify_chain()
    print(json.dumps({"entries": len(ledger), **verification.to_dict()}, indent=2))
    return 0 if verification.valid else 1


def _cmd_export_ledger(args: argparse.Namespace) -> int:
    ledger = AuditLedger(JsonlAuditStore(Path(args.ledger)))
    text = ledger.export_json_str()
    if args.out:
        Path(args.out).write_text(text, encoding="utf-8")
        print(f"Wrote {args.out}", file=sys.stderr)
    else:
        print(text)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Evaluate reserve compliance and manage the audit ledger.")
    sub = parser.add_subparsers(dest="command", required=True)

    evaluate = sub.add_parser("evaluate", help="Run one compliance evaluation.")
    evaluate.add_argument("--scenario", choices=sorted(SCENARIOS), help="Use a built-in demo scenario.")
    evaluate.add_argument("--reserves", help="Path to a ReserveData JSON file.")
    evaluate.add_argument("--liabilities", help="Path to a LiabilityData JSON file.")
    evaluate.add_argument("--policy", help="Policy preset name or JSON/YAML file.")
    evaluate.add_argument("--ledger", help="JSONL audit ledger to append to.")
    evaluate.add_argument("--out-dir", help="Directory for result, on-chain report and markdown outputs.")
    evaluate.add_argument("--explain", action="store_true", help="Print an advisory explanation.")
    evaluate.set_defaults(func=_cmd_evaluate)

    verify = sub.add_parser("verify-ledger", help="Verify the hash chain of a JSONL ledger.")
    verify.add_argument("--ledger", required=True)
    verify.set_defaults(func=_cmd_verify_ledger)

    export = sub.add_parser("export-ledger", help="Export a JSONL ledger for external audit.")
    export.add_argument("--ledger", required=True)
    export.add_argument("--out")
    export.set_defaults(func=_cmd_export_ledger)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
        configure_logging(level=settings.log_level, json_format=settings.json_logs)
        return args.func(args)
    except ReserveGuardError as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
