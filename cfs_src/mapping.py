"""Variable mapping: canonical indicator ids to dataset column names.

Resolution is a pure function of the dataset's columns and a user supplied
map. Interactive elicitation lives in prompt_variable_map(), an I/O adapter
whose output is fed to the same resolver; classification itself never
blocks on terminal input.

Usage:
    variable_map = resolve_variable_map(
        df.columns,
        {"p40": "My_Dressing_Var", "n1": "My_Health_Var", "n50": None},
    )
    variable_map.column_for("p40")        # "My_Dressing_Var"
    variable_map.columns_for(IndicatorGroup.BALD)
"""

import logging
import warnings
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import pandas as pd

from .catalog import CATALOG, IndicatorGroup, group_ids
from .errors import ConfigurationError, UnknownColumnError, UnmappedVariableWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariableMap:
    """Resolved mapping for one classification run.

    Every canonical id maps either to a column that exists in the target
    table or to None ("absent").
    """
    columns: Mapping[str, str | None] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    def column_for(self, indicator_id: str) -> str | None:
        """Mapped column name, or None if the indicator is absent."""
        return self.columns.get(indicator_id)

    def is_absent(self, indicator_id: str) -> bool:
        return self.column_for(indicator_id) is None

    def columns_for(self, group: IndicatorGroup) -> list[str]:
        """Mapped columns for a group, skipping absent indicators."""
        return [
            column
            for column in (self.column_for(i) for i in group_ids(group))
            if column is not None
        ]

    def absent_ids(self) -> list[str]:
        return [i for i, column in self.columns.items() if column is None]

    def to_dict(self) -> dict[str, str | None]:
        return dict(self.columns)


def _normalize_entry(indicator_id: str, value: object) -> str | None:
    """Turn a raw map value into a column name or None."""
    if value is None:
        return None
    if not isinstance(value, str) and pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if not isinstance(value, str):
        raise ConfigurationError(
            f"Mapping for '{indicator_id}' must be a column name or None, got {type(value).__name__}"
        )
    value = value.strip()
    return value or None


def resolve_variable_map(
    data_columns: Iterable[str],
    provided_map: Mapping[str, object] | None,
    requested_ids: Iterable[str] | None = None,
) -> VariableMap:
    """Resolve canonical indicator ids against a dataset's columns.

    Args:
        data_columns: Column names of the input table
        provided_map: Canonical id -> column name. None, blank strings and
            NaN mean "absent". Keys outside the catalog are ignored.
        requested_ids: Ids to resolve (defaults to the whole catalog)

    Returns:
        Immutable VariableMap covering every requested id

    Raises:
        ConfigurationError: If provided_map is not a mapping, or a value is
            not a string/None, or a requested id is not in the catalog
        UnknownColumnError: If a mapped column is missing from the data
    """
    if provided_map is None:
        provided_map = {}
    if not isinstance(provided_map, Mapping):
        raise ConfigurationError(
            "variable_map must be a mapping of canonical ids to column names "
            "(e.g. {'p40': 'user_column_name'})"
        )

    requested = list(CATALOG) if requested_ids is None else list(requested_ids)
    unknown_ids = [i for i in requested if i not in CATALOG]
    if unknown_ids:
        raise ConfigurationError(f"Unknown canonical indicator ids: {', '.join(unknown_ids)}")

    ignored = sorted(str(k) for k in provided_map if k not in CATALOG)
    if ignored:
        logger.warning(f"Ignoring mappings for unknown indicator ids: {', '.join(ignored)}")

    available = set(data_columns)
    resolved: dict[str, str | None] = {}

    for indicator_id in requested:
        column = _normalize_entry(indicator_id, provided_map.get(indicator_id))

        if column is None:
            warnings.warn(
                f"Standard CFS variable '{indicator_id}' ({CATALOG[indicator_id].description}) "
                "is not mapped. It will be treated as missing.",
                UnmappedVariableWarning,
                stacklevel=2,
            )
        elif column not in available:
            raise UnknownColumnError(indicator_id, column)

        resolved[indicator_id] = column

    mapped = sum(1 for c in resolved.values() if c is not None)
    logger.debug(f"Resolved {mapped}/{len(resolved)} CFS indicators to dataset columns")
    return VariableMap(resolved)


def prompt_variable_map(
    data_columns: Iterable[str],
    requested_ids: Iterable[str] | None = None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> dict[str, str | None]:
    """Ask the user, one indicator at a time, which column holds it.

    Blank input marks the indicator as absent. The returned dict is meant
    to be passed to resolve_variable_map().

    Raises:
        UnknownColumnError: If the user enters a name not in data_columns
    """
    available = set(data_columns)
    requested = list(CATALOG) if requested_ids is None else list(requested_ids)
    answers: dict[str, str | None] = {}

    output_fn("\n--- Variable Mapping Required ---")
    output_fn(
        "Enter the column name from your dataset for each standard CFS variable. "
        "Leave blank if the variable is not available."
    )

    for indicator_id in requested:
        definition = CATALOG[indicator_id]
        user_input = input_fn(
            f"Standard CFS Variable: '{indicator_id}'\n"
            f"Description: {definition.description}\n"
            f"Enter the column name for '{indicator_id}': "
        ).strip()

        if not user_input:
            output_fn(f"  '{indicator_id}' will be treated as missing.")
            answers[indicator_id] = None
            continue

        if user_input not in available:
            raise UnknownColumnError(indicator_id, user_input)
        answers[indicator_id] = user_input

    output_fn("--- Variable Mapping Complete ---\n")
    return answers
