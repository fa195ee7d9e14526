"""CFS rules engine.

This package provides deterministic Clinical Frailty Scale assignment from
derived indicator counts and auxiliary survey answers.

Architecture:
    Raw table -> Mapping -> Cleaning -> Counts -> Rules Engine -> Score

Decision tables are versioned data (see decision_tables.py); the engine
only knows how to evaluate a table, not what any table says.
"""

from .schemas import (
    CFSScaleVersion,
    PhysicalActivityScale,
    FrailtyInputs,
    Rule,
    DecisionTable,
    RuleMatch,
)
from .decision_tables import (
    CFS9_TABLE,
    CFS7_LEGACY_TABLE,
    DECISION_TABLES,
    get_decision_table,
)
from .cfs_engine import CFSRulesEngine

__all__ = [
    "CFSScaleVersion",
    "PhysicalActivityScale",
    "FrailtyInputs",
    "Rule",
    "DecisionTable",
    "RuleMatch",
    "CFS9_TABLE",
    "CFS7_LEGACY_TABLE",
    "DECISION_TABLES",
    "get_decision_table",
    "CFSRulesEngine",
]
