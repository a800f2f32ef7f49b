from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from ..rules_engine.models import LiabilityData, ReserveData
from ..validation import validate_liability_data, validate_reserve_data
from .scenarios import SCENARIOS, build_scenario


@dataclass(frozen=True)
class EvaluationInputs:
    reserves: ReserveData
    liabilities: LiabilityData


class DataSource(Protocol):
    def fetch_inputs(self, *, now: datetime) -> EvaluationInputs:
        """Return one reserve/liability snapshot pair for an evaluation cycle."""
        ...


def get_data_source(name: str, **kwargs: Any) -> DataSource:
    """Resolve a data source implementation by name (scenario|files)."""
    source = (name or "").strip().lower()
    if source in ("scenario", ""):
        return ScenarioDataSource(kwargs.get("scenario", "healthy"))
    if source == "files":
        return FileDataSource(
            reserves_path=Path(kwargs["reserves_path"]),
            liabilities_path=Path(kwargs["liabilities_path"]),
        )
    raise ValueError(f"Unknown data source '{name}' (expected 'scenario' or 'files').")


class ScenarioDataSource:
    def __init__(self, scenario: str):
        if scenario not in SCENARIOS:
            raise ValueError(f"Unknown scenario '{scenario}' (expected one of {sorted(SCENARIOS)}).")
        self.scenario = scenario

    @property
    def policy(self) -> str:
        return SCENARIOS[self.scenario].policy

    def fetch_inputs(self, *, now: datetime) -> EvaluationInputs:
        reserves, liabilities = build_scenario(self.scenario, now=now)
        return EvaluationInputs(reserves=reserves, liabilities=liabilities)


class FileDataSource:
    """Reads camelCase JSON snapshots as delivered by the fetch layer."""

    def __init__(self, *, reserves_path: Path, liabilities_path: Path):
        self.reserves_path = reserves_path
        self.liabilities_path = liabilities_path

    def fetch_inputs(self, *, now: datetime) -> EvaluationInputs:
        return EvaluationInputs(
            reserves=validate_reserve_data(_load_json(self.reserves_path)),
            liabilities=validate_liability_data(_load_json(self.liabilities_path)),
        )


def _load_json(path: Path):
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)
