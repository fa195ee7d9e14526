"""Descriptive labels and coarse groups for CFS scores."""

import logging

import pandas as pd

from .errors import ConfigurationError
from .rules.cfs_criteria import CFS_SCORE_COLUMN

logger = logging.getLogger(__name__)

CFS_LABELS = {
    1: "Very Fit",
    2: "Fit",
    3: "Managing Well",
    4: "Living with Very Mild Frailty",
    5: "Living with Mild Frailty",
    6: "Living with Moderate Frailty",
    7: "Living with Severe Frailty",
    8: "Living with Very Severe Frailty",
    9: "Terminally Ill",
}

# Right-closed bands: (upper bound inclusive, group name)
GROUP_SCHEMES = {
    "2group": ((4, "non-frail"), (9, "frail")),
    "3group": ((3, "fit"), (5, "pre-frail"), (9, "frail")),
}


def _as_score(score) -> int | None:
    if score is None or (not isinstance(score, str) and pd.isna(score)):
        return None
    try:
        value = float(score)
    except (TypeError, ValueError):
        return None
    if not value.is_integer() or not 1 <= value <= 9:
        return None
    return int(value)


def label_cfs(score) -> str | None:
    """Descriptive label for a CFS score, None if the score is not 1-9."""
    value = _as_score(score)
    if value is None:
        if score is not None and not pd.isna(score):
            logger.warning(f"CFS score {score!r} is outside 1-9; label set to missing")
        return None
    return CFS_LABELS[value]


def group_cfs(score, scheme: str = "2group") -> str | None:
    """Coarse frailty group for a CFS score.

    Args:
        score: CFS score (string or number)
        scheme: "2group" (non-frail 1-4, frail 5-9) or "3group"
            (fit 1-3, pre-frail 4-5, frail 6-9)

    Raises:
        ConfigurationError: If the scheme is unknown
    """
    if scheme not in GROUP_SCHEMES:
        raise ConfigurationError(
            f"Unknown grouping scheme '{scheme}'. Expected one of: {', '.join(GROUP_SCHEMES)}"
        )
    value = _as_score(score)
    if value is None:
        return None
    for upper, name in GROUP_SCHEMES[scheme]:
        if value <= upper:
            return name
    return None


def add_cfs_labels(
    df: pd.DataFrame,
    scheme: str = "2group",
    score_column: str = CFS_SCORE_COLUMN,
) -> pd.DataFrame:
    """Add cfs_label and cfs_group columns derived from the score column."""
    if scheme not in GROUP_SCHEMES:
        raise ConfigurationError(f"Unknown grouping scheme '{scheme}'")
    df = df.copy()
    scores = df[score_column]
    df["cfs_label"] = pd.array([label_cfs(s) for s in scores], dtype="string")
    df["cfs_group"] = pd.array([group_cfs(s, scheme) for s in scores], dtype="string")
    return df
