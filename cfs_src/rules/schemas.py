"""Schemas for the CFS rules engine.

This module defines:
- CFSScaleVersion: Which decision table to apply
- PhysicalActivityScale: How the physical activity column is recorded
- FrailtyInputs: The per-subject values a decision table reads
- Rule: One (predicate, score) row of a decision table
- DecisionTable: A named, ordered rule list evaluated first-match-wins
- RuleMatch: Output of evaluating one subject
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import pandas as pd


class CFSScaleVersion(str, Enum):
    """Versioned decision tables."""
    CFS9 = "cfs9"                   # Current 1-9 scale with terminal illness
    CFS7_LEGACY = "cfs7_legacy"     # Historical 1-7 scale


class PhysicalActivityScale(str, Enum):
    """How the mapped physical activity column is coded."""
    ORDINAL = "ordinal"     # 1=More than once a week ... 4=Rarely/never
    BINARY = "binary"       # 0=Inactive, 1=Active


def _as_code(value) -> int | None:
    if value is None or pd.isna(value):
        return None
    return int(value)


@dataclass(frozen=True)
class FrailtyInputs:
    """Values one subject contributes to classification.

    Auxiliary values are None when missing. Counts are never missing.
    """
    balds_count: int = 0
    ialds_count: int = 0
    diseases_count: int = 0
    general_health: int | None = None
    daily_effort: int | None = None
    physical_activity: int | None = None
    terminally_ill: int | None = None

    @classmethod
    def from_values(
        cls,
        balds_count,
        ialds_count,
        diseases_count,
        general_health=None,
        daily_effort=None,
        physical_activity=None,
        terminally_ill=None,
    ) -> "FrailtyInputs":
        """Build from raw frame values, mapping NA/NaN to None."""
        return cls(
            balds_count=int(balds_count),
            ialds_count=int(ialds_count),
            diseases_count=int(diseases_count),
            general_health=_as_code(general_health),
            daily_effort=_as_code(daily_effort),
            physical_activity=_as_code(physical_activity),
            terminally_ill=_as_code(terminally_ill),
        )

    def missing_fields(self, names: tuple[str, ...]) -> list[str]:
        """Which of the named fields are missing."""
        return [name for name in names if getattr(self, name) is None]

    def to_dict(self) -> dict:
        return {
            "balds_count": self.balds_count,
            "ialds_count": self.ialds_count,
            "diseases_count": self.diseases_count,
            "general_health": self.general_health,
            "daily_effort": self.daily_effort,
            "physical_activity": self.physical_activity,
            "terminally_ill": self.terminally_ill,
        }


Predicate = Callable[[FrailtyInputs, int], bool]
ScoreAction = str | Callable[[FrailtyInputs], str]


@dataclass(frozen=True)
class Rule:
    """A decision table row.

    The predicate receives the subject's inputs and the minimum
    comorbidities threshold. The score is either a fixed string or a
    function of the inputs.
    """
    number: int
    description: str
    predicate: Predicate
    score: ScoreAction

    def matches(self, inputs: FrailtyInputs, min_comorbidities: int) -> bool:
        return bool(self.predicate(inputs, min_comorbidities))

    def score_for(self, inputs: FrailtyInputs) -> str:
        if callable(self.score):
            return self.score(inputs)
        return self.score


@dataclass(frozen=True)
class DecisionTable:
    """Ordered rule list; the first matching rule decides the score.

    scores lists every value a rule of the table may assign.
    required_inputs lists FrailtyInputs fields that must all be present for
    any score to stand. When one is missing the score is cleared after
    evaluation, whichever rule matched.
    """
    version: CFSScaleVersion
    rules: tuple[Rule, ...]
    scores: tuple[str, ...]
    required_inputs: tuple[str, ...] = ()
    physical_activity_scale: PhysicalActivityScale = PhysicalActivityScale.ORDINAL
    description: str = ""

    def rule(self, number: int) -> Rule:
        for rule in self.rules:
            if rule.number == number:
                return rule
        raise KeyError(f"{self.version.value} has no rule {number}")


@dataclass
class RuleMatch:
    """Outcome of evaluating one subject against a decision table."""
    score: str | None
    rule_number: int | None = None
    matched_rules: list[int] = field(default_factory=list)
    missing_inputs: list[str] = field(default_factory=list)

    @property
    def is_missing(self) -> bool:
        return self.score is None

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "rule_number": self.rule_number,
            "matched_rules": self.matched_rules,
            "missing_inputs": self.missing_inputs,
        }
