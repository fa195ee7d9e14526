"""Cleaning of CFS indicator columns.

Every cell outside an indicator's allowed codes becomes missing (pd.NA).
The reserved survey code 9 is always missing, even where an indicator's
numeric range would include it. Non-numeric cells are missing too.

Cleaned columns use the nullable Int64 dtype, so a cleaned column never
carries a sentinel number for missing and re-cleaning it is a no-op.
"""

import logging
import warnings
from collections.abc import Iterable

import pandas as pd

from .errors import CFSWarning, OutOfDomainWarning
from .rules.cfs_criteria import MISSING_CODE

logger = logging.getLogger(__name__)


def clean_series(column: pd.Series, allowed_values: Iterable[int]) -> pd.Series:
    """Clean a single column against a set of allowed codes.

    Args:
        column: Raw column values
        allowed_values: Valid codes for the indicator

    Returns:
        New Int64 series with out-of-domain values replaced by pd.NA
    """
    allowed = {v for v in allowed_values if v != MISSING_CODE}
    numeric = pd.to_numeric(column, errors="coerce")
    keep = numeric.isin(allowed)
    return numeric.where(keep).astype("Int64")


def clean_cfs_variables(
    df: pd.DataFrame,
    variables: Iterable[str],
    allowed_values: Iterable[int],
) -> pd.DataFrame:
    """Clean the named columns of a data frame.

    Columns missing from the frame are skipped with a warning.

    Args:
        df: Input data frame (not modified)
        variables: Column names to clean
        allowed_values: Valid codes shared by all listed columns

    Returns:
        Copy of df with the listed columns cleaned
    """
    allowed = frozenset(allowed_values)
    df = df.copy()

    for var in variables:
        if var not in df.columns:
            warnings.warn(
                f"Variable '{var}' not found in the data frame. Skipping cleaning for this variable.",
                CFSWarning,
                stacklevel=2,
            )
            continue

        original = df[var]
        cleaned = clean_series(original, allowed)

        # Count only cells that were present and got blanked
        replaced = int((original.notna() & cleaned.isna()).sum())
        if replaced:
            warnings.warn(
                f"Variable '{var}': {replaced} value(s) outside {sorted(allowed)} set to missing",
                OutOfDomainWarning,
                stacklevel=2,
            )
        logger.debug(f"Cleaned '{var}' against {sorted(allowed)} ({replaced} replaced)")

        df[var] = cleaned

    return df
