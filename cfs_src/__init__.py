"""Clinical Frailty Scale (CFS) classification for survey datasets.

Pipeline:
    raw table -> variable mapping -> cleaning -> group counts
    -> rules engine -> cfs_score -> (optional) validation, labels
"""

from .catalog import CATALOG, IndicatorDefinition, IndicatorGroup
from .classifier import classify_cfs
from .cleaning import clean_cfs_variables
from .counts import add_group_counts
from .errors import (
    CFSError,
    CFSWarning,
    ConfigurationError,
    OutOfDomainWarning,
    PhysicalActivityScaleWarning,
    UnknownColumnError,
    UnmappedVariableWarning,
)
from .labels import add_cfs_labels, group_cfs, label_cfs
from .mapping import VariableMap, prompt_variable_map, resolve_variable_map
from .rules import CFSRulesEngine, CFSScaleVersion, FrailtyInputs, PhysicalActivityScale
from .validation import NAComparison, ValidationReport, validate_cfs

__all__ = [
    "CATALOG",
    "IndicatorDefinition",
    "IndicatorGroup",
    "classify_cfs",
    "clean_cfs_variables",
    "add_group_counts",
    "CFSError",
    "CFSWarning",
    "ConfigurationError",
    "OutOfDomainWarning",
    "PhysicalActivityScaleWarning",
    "UnknownColumnError",
    "UnmappedVariableWarning",
    "add_cfs_labels",
    "group_cfs",
    "label_cfs",
    "VariableMap",
    "prompt_variable_map",
    "resolve_variable_map",
    "CFSRulesEngine",
    "CFSScaleVersion",
    "FrailtyInputs",
    "PhysicalActivityScale",
    "NAComparison",
    "ValidationReport",
    "validate_cfs",
]
