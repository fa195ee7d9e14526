"""Exceptions and warnings raised during CFS classification.

Errors abort a run before any row is processed. Warnings flag degraded
inputs; the affected values become missing and the run continues.
"""


class CFSError(Exception):
    """Base class for CFS classification errors."""


class ConfigurationError(CFSError):
    """Malformed configuration (variable map, scale, threshold, scheme)."""


class UnknownColumnError(CFSError):
    """A canonical indicator is mapped to a column absent from the data."""

    def __init__(self, indicator_id: str, column: str):
        self.indicator_id = indicator_id
        self.column = column
        super().__init__(
            f"Column '{column}' mapped for '{indicator_id}' was not found in the input data"
        )


class CFSWarning(UserWarning):
    """Base class for non-fatal CFS warnings."""


class UnmappedVariableWarning(CFSWarning):
    """A canonical indicator has no column mapping and is treated as absent."""


class OutOfDomainWarning(CFSWarning):
    """Cleaning replaced values outside an indicator's domain with missing."""


class PhysicalActivityScaleWarning(CFSWarning):
    """Physical activity was converted between its ordinal and binary scales."""
