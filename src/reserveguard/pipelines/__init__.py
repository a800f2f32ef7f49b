from .data_source import (
    DataSource,
    EvaluationInputs,
    FileDataSource,
    ScenarioDataSource,
    get_data_source,
)
from .scenarios import SCENARIOS, Scenario, build_scenario

__all__ = [
    "DataSource",
    "EvaluationInputs",
    "FileDataSource",
    "ScenarioDataSource",
    "get_data_source",
    "SCENARIOS",
    "Scenario",
    "build_scenario",
]
