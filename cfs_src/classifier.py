"""End-to-end CFS classification of a tabular dataset.

Pipeline:
    raw table -> resolve variable map -> clean indicator columns
    -> derive group counts -> project auxiliary inputs to canonical
    columns -> rules engine -> cfs_score

The input frame is never modified; a widened copy is returned with
balds_count, ialds_count, diseases_count, the canonical auxiliary columns
(general_health, daily_effort, physical_activity, terminally_ill) and
cfs_score. The canonical columns let the validator re-derive scores
without knowing the variable map.

Example:
    classified = classify_cfs(
        survey_df,
        variable_map={"p40": "My_Dressing_Var", "n1": "My_Health_Var", ...},
        min_comorbidities=10,
    )
"""

import logging
import warnings
from collections.abc import Mapping

import pandas as pd

from .catalog import (
    CATALOG,
    DAILY_EFFORT_ID,
    GENERAL_HEALTH_ID,
    PHYSICAL_ACTIVITY_ID,
    TERMINALLY_ILL_ID,
    IndicatorGroup,
)
from .cleaning import clean_cfs_variables
from .config import Config
from .counts import add_group_counts
from .errors import ConfigurationError, PhysicalActivityScaleWarning
from .mapping import VariableMap, resolve_variable_map
from .rules.cfs_criteria import (
    BINARY_DOMAIN,
    CFS_RULE_COLUMN,
    CFS_SCORE_COLUMN,
    DAILY_EFFORT_COLUMN,
    GENERAL_HEALTH_COLUMN,
    PHYSICAL_ACTIVITY_BINARY_DOMAIN,
    PHYSICAL_ACTIVITY_COLUMN,
    PHYSICALLY_ACTIVE_CODES,
    PHYSICALLY_INACTIVE_CODES,
    TERMINALLY_ILL_COLUMN,
)
from .rules.cfs_engine import CFSRulesEngine
from .rules.decision_tables import get_decision_table
from .rules.schemas import CFSScaleVersion, DecisionTable, PhysicalActivityScale

logger = logging.getLogger(__name__)

_CANONICAL_AUXILIARY = {
    GENERAL_HEALTH_ID: GENERAL_HEALTH_COLUMN,
    DAILY_EFFORT_ID: DAILY_EFFORT_COLUMN,
    PHYSICAL_ACTIVITY_ID: PHYSICAL_ACTIVITY_COLUMN,
    TERMINALLY_ILL_ID: TERMINALLY_ILL_COLUMN,
}


def resolve_scale(scale: CFSScaleVersion | str | None) -> DecisionTable:
    """Decision table for a scale version (Config default when None)."""
    try:
        return get_decision_table(scale or Config.SCALE_VERSION)
    except ValueError:
        raise ConfigurationError(
            f"Unknown CFS scale '{scale}'. "
            f"Expected one of: {', '.join(v.value for v in CFSScaleVersion)}"
        ) from None


def resolve_physical_activity_scale(
    scale: PhysicalActivityScale | str | None,
) -> PhysicalActivityScale:
    try:
        return PhysicalActivityScale(scale or Config.PHYSICAL_ACTIVITY_SCALE)
    except ValueError:
        raise ConfigurationError(
            f"Unknown physical activity scale '{scale}'. Expected 'ordinal' or 'binary'"
        ) from None


def resolve_min_comorbidities(min_comorbidities: int | None) -> int:
    value = Config.get_min_comorbidities(min_comorbidities)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"min_comorbidities must be an integer >= 0, got {value!r}")
    return value


def physical_activity_to_binary(column: pd.Series) -> pd.Series:
    """Convert cleaned ordinal physical activity (1-4) to the binary flag.

    Weekly or more (1, 2) -> 1, less often (3, 4) -> 0, missing stays missing.
    """
    binary = pd.Series(pd.NA, index=column.index, dtype="Int64")
    binary[column.isin(PHYSICALLY_ACTIVE_CODES).fillna(False).to_numpy(dtype=bool)] = 1
    binary[column.isin(PHYSICALLY_INACTIVE_CODES).fillna(False).to_numpy(dtype=bool)] = 0
    return binary


def _check_columns(columns: pd.Index, variable_map: VariableMap) -> None:
    """Reject inputs the canonical projection would read or overwrite ambiguously.

    Raises:
        ConfigurationError: If a mapped column label is duplicated, or an
            input column carries a canonical output name without being
            mapped to one of the auxiliary indicators
    """
    duplicated = set(columns[columns.duplicated()])
    mapped = {c for c in variable_map.columns.values() if c is not None}
    ambiguous = sorted(duplicated & (mapped | set(_CANONICAL_AUXILIARY.values())))
    if ambiguous:
        raise ConfigurationError(f"Duplicated column labels: {', '.join(ambiguous)}")

    auxiliary_sources = {variable_map.column_for(i) for i in _CANONICAL_AUXILIARY}
    clashes = [
        canonical
        for canonical in _CANONICAL_AUXILIARY.values()
        if canonical in columns and canonical not in auxiliary_sources
    ]
    if clashes:
        raise ConfigurationError(
            f"Input columns {', '.join(clashes)} would be overwritten by the canonical "
            "auxiliary outputs; rename them or map them to their indicators"
        )


def _clean_mapped(
    df: pd.DataFrame,
    variable_map: VariableMap,
    activity_scale: PhysicalActivityScale,
) -> pd.DataFrame:
    """Clean every mapped indicator column against its domain."""
    for group in (IndicatorGroup.BALD, IndicatorGroup.IADL, IndicatorGroup.DISEASE):
        columns = variable_map.columns_for(group)
        if columns:
            df = clean_cfs_variables(df, columns, BINARY_DOMAIN)

    for indicator_id in _CANONICAL_AUXILIARY:
        column = variable_map.column_for(indicator_id)
        if column is None:
            continue
        domain = CATALOG[indicator_id].domain
        if indicator_id == PHYSICAL_ACTIVITY_ID and activity_scale == PhysicalActivityScale.BINARY:
            domain = PHYSICAL_ACTIVITY_BINARY_DOMAIN
        df = clean_cfs_variables(df, [column], domain)

    return df


def _project_auxiliary(
    df: pd.DataFrame,
    variable_map: VariableMap,
    activity_scale: PhysicalActivityScale,
    table: DecisionTable,
) -> pd.DataFrame:
    """Copy cleaned auxiliary inputs to their canonical column names.

    Every source column is read before any canonical column is written, so
    a source may itself carry another indicator's canonical name.
    """
    projected = {}
    for indicator_id, canonical in _CANONICAL_AUXILIARY.items():
        column = variable_map.column_for(indicator_id)
        if column is None:
            projected[canonical] = pd.array([pd.NA] * len(df), dtype="Int64")
            continue

        values = df[column]
        if (
            indicator_id == PHYSICAL_ACTIVITY_ID
            and activity_scale == PhysicalActivityScale.ORDINAL
            and table.physical_activity_scale == PhysicalActivityScale.BINARY
        ):
            values = physical_activity_to_binary(values)
        projected[canonical] = values.astype("Int64").array

    for canonical, values in projected.items():
        df[canonical] = values

    return df


def classify_cfs(
    data: pd.DataFrame,
    variable_map: VariableMap | Mapping[str, object] | None = None,
    min_comorbidities: int | None = None,
    scale: CFSScaleVersion | str | None = None,
    physical_activity_scale: PhysicalActivityScale | str | None = None,
    include_rule: bool = False,
) -> pd.DataFrame:
    """Classify every subject of a dataset on the Clinical Frailty Scale.

    Args:
        data: One row per subject
        variable_map: Canonical id -> column name (or a resolved VariableMap).
            Unmapped ids are treated as absent.
        min_comorbidities: Comorbidity threshold M (Config default: 10)
        scale: Decision table version, "cfs9" or "cfs7_legacy"
        physical_activity_scale: How the physical activity column is
            coded, "ordinal" (1-4) or "binary" (0/1)
        include_rule: Also return the number of the rule that fired

    Returns:
        Copy of data with cleaned indicator columns, the three counts, the
        canonical auxiliary columns and cfs_score

    Raises:
        ConfigurationError: Malformed map, scale or threshold, a duplicated
            mapped column, or an input column that clashes with a canonical
            auxiliary output
        UnknownColumnError: A mapped column is missing from data
    """
    table = resolve_scale(scale)
    activity_scale = resolve_physical_activity_scale(physical_activity_scale)
    threshold = resolve_min_comorbidities(min_comorbidities)

    if (
        table.physical_activity_scale == PhysicalActivityScale.ORDINAL
        and activity_scale == PhysicalActivityScale.BINARY
    ):
        raise ConfigurationError(
            f"{table.version.value} needs physical activity on the 1-4 scale; "
            "a binary column cannot be converted back"
        )

    df = pd.DataFrame(data).copy()

    if isinstance(variable_map, VariableMap):
        variable_map = variable_map.to_dict()
    resolved = resolve_variable_map(df.columns, variable_map)
    _check_columns(df.columns, resolved)

    if (
        not resolved.is_absent(PHYSICAL_ACTIVITY_ID)
        and activity_scale != table.physical_activity_scale
    ):
        warnings.warn(
            f"Physical activity '{resolved.column_for(PHYSICAL_ACTIVITY_ID)}' is recorded on the "
            f"1-4 scale but {table.version.value} uses a binary flag; converting "
            f"{sorted(PHYSICALLY_ACTIVE_CODES)} -> 1 and {sorted(PHYSICALLY_INACTIVE_CODES)} -> 0",
            PhysicalActivityScaleWarning,
            stacklevel=2,
        )

    logger.info(
        f"Classifying {len(df)} rows with {table.version.value} "
        f"({len(resolved.absent_ids())} indicators unmapped)"
    )

    df = _clean_mapped(df, resolved, activity_scale)
    df = add_group_counts(df, resolved)
    df = _project_auxiliary(df, resolved, activity_scale, table)

    engine = CFSRulesEngine(table, threshold)
    result = engine.classify_frame(df)
    df[CFS_SCORE_COLUMN] = result[CFS_SCORE_COLUMN].array
    if include_rule:
        df[CFS_RULE_COLUMN] = result[CFS_RULE_COLUMN].array

    return df
