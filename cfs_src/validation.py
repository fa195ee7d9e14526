"""Independent re-derivation of CFS scores for consistency checking.

The validator does not call the rules engine. It recomputes the expected
score as one vectorised expression over the canonical columns written by
classify_cfs() (the three counts plus general_health, daily_effort,
physical_activity and terminally_ill) and compares it with cfs_score.

A mismatch is data, not an error: the validator never raises for it.

## NA comparison

- strict (default): both scores present -> equality; one missing -> False;
  both missing -> NA (neither pass nor fail)
- lenient: both missing -> True; one missing -> False

## Usage

```python
classified = classify_cfs(df, variable_map)
report = validate_cfs(classified, min_comorbidities=10)
print(report.summary)          # {"true": 998, "false": 0, "na": 2, ...}
report.failed                  # rows where check_pass is False
```
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd

from .config import Config
from .errors import ConfigurationError
from .rules.cfs_criteria import (
    AUXILIARY_COLUMNS,
    BALDS_COUNT_COLUMN,
    CFS_SCORE_COLUMN,
    CHECK_PASS_COLUMN,
    DAILY_EFFORT_COLUMN,
    DISEASES_COUNT_COLUMN,
    EXPECTED_CFS_COLUMN,
    FALLBACK_SCORE,
    GENERAL_HEALTH_COLUMN,
    IADLS_COUNT_COLUMN,
    MAX_DAILY_EFFORT_CODE,
    MODERATE_IADL_COUNT,
    PHYSICAL_ACTIVITY_COLUMN,
    POOR_GENERAL_HEALTH,
    SEVERE_BALD_COUNT,
    TERMINAL_MAX_BALD_COUNT,
    TERMINALLY_ILL_COLUMN,
)
from .rules.schemas import CFSScaleVersion

logger = logging.getLogger(__name__)


class NAComparison(str, Enum):
    """How two missing scores compare."""
    STRICT = "strict"
    LENIENT = "lenient"


@dataclass
class ValidationReport:
    """Result of validating a classified table."""
    table: pd.DataFrame
    summary: dict[str, Any] = field(default_factory=dict)
    failed: pd.DataFrame = field(default_factory=pd.DataFrame)

    @property
    def all_passed(self) -> bool:
        return self.summary.get("false", 0) == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "failed_rows": self.failed.index.tolist(),
        }


def _integral(numeric: pd.Series) -> np.ndarray:
    values = numeric.to_numpy(dtype=float)
    return np.isfinite(values) & (values == np.floor(values))


def _column(df: pd.DataFrame, name: str) -> pd.Series:
    """Canonical column as nullable Int64 (all missing if absent).

    Non-numeric and non-integral values read as missing.
    """
    if name not in df.columns:
        return pd.Series(pd.NA, index=df.index, dtype="Int64")
    numeric = pd.to_numeric(df[name], errors="coerce").astype("float64")
    return numeric.where(_integral(numeric)).astype("Int64")


def _eq(series: pd.Series, value: int) -> np.ndarray:
    return series.eq(value).fillna(False).to_numpy(dtype=bool)


def _in(series: pd.Series, values) -> np.ndarray:
    return series.isin(list(values)).to_numpy(dtype=bool)


def _expected_cfs9(df: pd.DataFrame, m: int) -> pd.Series:
    b = _column(df, BALDS_COUNT_COLUMN).fillna(0).to_numpy(dtype=int)
    i = _column(df, IADLS_COUNT_COLUMN).fillna(0).to_numpy(dtype=int)
    d = _column(df, DISEASES_COUNT_COLUMN).fillna(0).to_numpy(dtype=int)
    gh = _column(df, GENERAL_HEALTH_COLUMN)
    e = _column(df, DAILY_EFFORT_COLUMN)
    p = _column(df, PHYSICAL_ACTIVITY_COLUMN)
    t = _column(df, TERMINALLY_ILL_COLUMN)

    no_adl = (b == 0) & (i == 0)
    mild = no_adl & (d < m)
    active = _eq(p, 1)
    inactive = _eq(p, 0)
    gh1 = _eq(gh, 1)
    gh23 = _in(gh, (2, 3))
    e12 = _in(e, (1, 2))
    e34 = _in(e, (3, 4))
    e1to4 = _in(e, (1, 2, 3, 4))

    terminal = _eq(t, 1)
    conditions = [
        terminal & (b <= TERMINAL_MAX_BALD_COUNT),
        terminal,
        b >= SEVERE_BALD_COUNT,
        np.isin(b, (1, 2)) | ((b == 0) & (i >= MODERATE_IADL_COUNT)),
        (b == 0) & (i >= 1) & (i < MODERATE_IADL_COUNT),
        no_adl & ((d >= m) | _in(gh, POOR_GENERAL_HEALTH) | _eq(e, MAX_DAILY_EFFORT_CODE)),
        mild & inactive & ((gh1 & e34) | (gh23 & e1to4)),
        mild & ((gh1 & e34 & active) | (gh23 & e1to4 & active) | (gh1 & e12 & inactive)),
        mild & gh1 & e12 & active,
    ]
    choices = ["9", "8", "7", "6", "5", "4", "3", "2", "1"]
    expected = np.select(conditions, choices, default=FALLBACK_SCORE).astype(object)

    complete = np.ones(len(df), dtype=bool)
    for name in AUXILIARY_COLUMNS:
        complete &= _column(df, name).notna().to_numpy(dtype=bool)
    expected[~complete] = None

    return pd.Series(pd.array(expected, dtype="string"), index=df.index)


def _expected_cfs7(df: pd.DataFrame, m: int) -> pd.Series:
    b = _column(df, BALDS_COUNT_COLUMN).fillna(0).to_numpy(dtype=int)
    i = _column(df, IADLS_COUNT_COLUMN).fillna(0).to_numpy(dtype=int)
    d = _column(df, DISEASES_COUNT_COLUMN).fillna(0).to_numpy(dtype=int)
    gh = _column(df, GENERAL_HEALTH_COLUMN)
    e = _column(df, DAILY_EFFORT_COLUMN)
    p = _column(df, PHYSICAL_ACTIVITY_COLUMN)

    mild = (b == 0) & (i == 0) & (d < m)
    gh0 = _eq(gh, 0)
    gh12 = _in(gh, (1, 2))
    e1 = _eq(e, 1)
    e23 = _in(e, (2, 3))
    regular = _in(p, (1, 2, 3))
    rarely = _eq(p, 4)

    conditions = [
        b >= SEVERE_BALD_COUNT,
        np.isin(b, (1, 2)) | ((b == 0) & (i >= MODERATE_IADL_COUNT)),
        (b == 0) & (i >= 1) & (i < MODERATE_IADL_COUNT),
        (b == 0) & (i == 0) & (d >= m),
        mild & gh0 & _eq(e, 4),
        mild & gh0 & e1 & regular,
        mild & ((gh0 & e1 & rarely) | (gh0 & e23 & regular) | (gh12 & e1 & regular) | (gh12 & e23 & regular)),
        mild & ((gh0 & e23 & rarely) | (gh12 & e1 & rarely) | (gh12 & e23 & rarely)),
        mild & _in(gh, (3, 4, 5)),
    ]
    choices = ["7", "6", "5", "4", "4", "1", "2", "3", "4"]
    expected = np.select(conditions, choices, default="").astype(object)
    expected[expected == ""] = None

    return pd.Series(pd.array(expected, dtype="string"), index=df.index)


_FORMULAS = {
    CFSScaleVersion.CFS9: _expected_cfs9,
    CFSScaleVersion.CFS7_LEGACY: _expected_cfs7,
}


def expected_cfs(
    df: pd.DataFrame,
    min_comorbidities: int | None = None,
    scale: CFSScaleVersion | str | None = None,
) -> pd.Series:
    """Recompute the expected score of every row.

    Args:
        df: Output of classify_cfs()
        min_comorbidities: Threshold M (Config default when None)
        scale: Scale version the table was classified with

    Returns:
        String series, pd.NA where no score is expected
    """
    m = Config.get_min_comorbidities(min_comorbidities)
    if m < 0:
        raise ConfigurationError(f"min_comorbidities must be >= 0, got {m}")
    try:
        version = CFSScaleVersion(scale or Config.SCALE_VERSION)
    except ValueError:
        raise ConfigurationError(f"Unknown CFS scale '{scale}'") from None
    return _FORMULAS[version](df, m)


def _as_scores(series: pd.Series) -> pd.Series:
    """Score column as strings; numeric columns (e.g. read back from CSV) lose the .0."""
    if not pd.api.types.is_numeric_dtype(series):
        return series.astype("string")
    numeric = series.astype("float64")
    integral = _integral(numeric)
    scores = numeric.astype("string")
    scores[integral] = numeric[integral].astype("int64").astype("string").array
    return scores


def compare_scores(
    actual: pd.Series,
    expected: pd.Series,
    na_mode: NAComparison | str = NAComparison.STRICT,
) -> pd.Series:
    """Row-wise agreement of two score series as a nullable boolean."""
    na_mode = NAComparison(na_mode)
    actual = _as_scores(actual)
    expected = _as_scores(expected)

    actual_na = actual.isna()
    expected_na = expected.isna()
    both_na = actual_na & expected_na

    check = (actual == expected).astype("boolean")
    check[actual_na ^ expected_na] = False
    check[both_na] = True if na_mode == NAComparison.LENIENT else pd.NA
    return check


def summarize_checks(check: pd.Series) -> dict[str, Any]:
    """Frequency of True / False / NA in a check_pass column."""
    passed = int(check.eq(True).fillna(False).sum())
    failed = int(check.eq(False).fillna(False).sum())
    missing = int(check.isna().sum())
    decided = passed + failed
    return {
        "true": passed,
        "false": failed,
        "na": missing,
        "total": len(check),
        "pass_rate": round(passed / decided * 100, 1) if decided else None,
    }


def validate_cfs(
    classified: pd.DataFrame,
    min_comorbidities: int | None = None,
    scale: CFSScaleVersion | str | None = None,
    na_mode: NAComparison | str | None = None,
) -> ValidationReport:
    """Re-derive every score and flag rows that disagree with cfs_score.

    Args:
        classified: Output of classify_cfs()
        min_comorbidities: Threshold M used at classification time
        scale: Scale version used at classification time
        na_mode: "strict" or "lenient" handling of two missing scores

    Returns:
        ValidationReport with the annotated table (expected_cfs,
        check_pass), the pass/fail/NA summary and the failing rows
    """
    try:
        na_mode = NAComparison(na_mode or Config.VALIDATION_NA_MODE)
    except ValueError:
        raise ConfigurationError(f"Unknown NA comparison mode '{na_mode}'") from None

    table = classified.copy()
    if CFS_SCORE_COLUMN not in table.columns:
        logger.warning(f"No '{CFS_SCORE_COLUMN}' column; every row is treated as unscored")
        table[CFS_SCORE_COLUMN] = pd.Series(pd.NA, index=table.index, dtype="string")

    table[EXPECTED_CFS_COLUMN] = expected_cfs(table, min_comorbidities, scale)
    table[CHECK_PASS_COLUMN] = compare_scores(
        table[CFS_SCORE_COLUMN], table[EXPECTED_CFS_COLUMN], na_mode
    )

    summary = summarize_checks(table[CHECK_PASS_COLUMN])
    failed = table[table[CHECK_PASS_COLUMN].eq(False).fillna(False)]

    if summary["false"]:
        logger.warning(f"CFS validation: {summary['false']} of {summary['total']} rows disagree")
    logger.info(
        f"CFS validation: {summary['true']} pass, {summary['false']} fail, "
        f"{summary['na']} undetermined ({na_mode.value})"
    )

    return ValidationReport(table=table, summary=summary, failed=failed)
