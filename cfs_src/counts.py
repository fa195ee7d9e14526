"""Per-row indicator counts for the BALD, IADL and DISEASE groups."""

import logging

import pandas as pd

from .catalog import IndicatorGroup
from .mapping import VariableMap
from .rules.cfs_criteria import (
    BALDS_COUNT_COLUMN,
    DISEASES_COUNT_COLUMN,
    IADLS_COUNT_COLUMN,
    POSITIVE_CODE,
)

logger = logging.getLogger(__name__)

GROUP_COUNT_COLUMNS = {
    IndicatorGroup.BALD: BALDS_COUNT_COLUMN,
    IndicatorGroup.IADL: IADLS_COUNT_COLUMN,
    IndicatorGroup.DISEASE: DISEASES_COUNT_COLUMN,
}


def count_positive(df: pd.DataFrame, columns: list[str]) -> pd.Series:
    """Count, per row, the columns whose cleaned value is the positive code.

    Missing cells are not counted. With no columns the count is 0 for every
    row: an unmapped group reports no difficulty rather than missing.
    """
    if not columns:
        return pd.Series(0, index=df.index, dtype="int64")
    hits = df[columns].eq(POSITIVE_CODE).fillna(False)
    return hits.sum(axis=1).astype("int64")


def add_group_counts(df: pd.DataFrame, variable_map: VariableMap) -> pd.DataFrame:
    """Add balds_count, ialds_count and diseases_count to a cleaned frame.

    Args:
        df: Frame whose mapped indicator columns are already cleaned
        variable_map: Resolved variable map for this run

    Returns:
        Copy of df with the three count columns
    """
    df = df.copy()
    for group, count_column in GROUP_COUNT_COLUMNS.items():
        columns = variable_map.columns_for(group)
        if not columns:
            logger.info(f"No {group.value} indicators mapped; {count_column} defaults to 0")
        df[count_column] = count_positive(df, columns)
    return df
