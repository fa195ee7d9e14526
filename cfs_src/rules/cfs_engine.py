"""CFS Rules Engine - Deterministic Clinical Frailty Scale assignment.

Applies a versioned decision table to the derived counts and auxiliary
inputs of each subject. Rows are evaluated top to bottom and the first
matching rule decides the score. No rule can overwrite an earlier one.

Completeness Gate (CFS 1-9):
- A score only stands when general health, daily effort, physical activity
  and terminal illness are all recorded
- Otherwise the score is cleared to missing, even if a rule matched,
  including the fallback rule

Classification is row independent; a subject's score depends only on its
own inputs.
"""

import logging

import pandas as pd

from ..errors import ConfigurationError
from .cfs_criteria import (
    AUXILIARY_COLUMNS,
    BALDS_COUNT_COLUMN,
    CFS_RULE_COLUMN,
    CFS_SCORE_COLUMN,
    DEFAULT_MIN_COMORBIDITIES,
    DISEASES_COUNT_COLUMN,
    IADLS_COUNT_COLUMN,
)
from .decision_tables import CFS9_TABLE, get_decision_table
from .schemas import CFSScaleVersion, DecisionTable, FrailtyInputs, RuleMatch

logger = logging.getLogger(__name__)

_INPUT_COLUMNS = (
    BALDS_COUNT_COLUMN,
    IADLS_COUNT_COLUMN,
    DISEASES_COUNT_COLUMN,
) + AUXILIARY_COLUMNS


class CFSRulesEngine:
    """Deterministic CFS decision table evaluation.

    Classification Flow:
    1. Evaluate every rule of the table against the subject's inputs
    2. Take the lowest-numbered matching rule as the result
    3. Clear the score if any input the table requires is missing
    """

    def __init__(
        self,
        table: DecisionTable | CFSScaleVersion | str = CFS9_TABLE,
        min_comorbidities: int = DEFAULT_MIN_COMORBIDITIES,
    ):
        if not isinstance(table, DecisionTable):
            table = get_decision_table(table)
        if min_comorbidities < 0:
            raise ConfigurationError(f"min_comorbidities must be >= 0, got {min_comorbidities}")
        self.table = table
        self.min_comorbidities = min_comorbidities

    def evaluate(self, inputs: FrailtyInputs) -> RuleMatch:
        """Score one subject.

        Args:
            inputs: Counts and auxiliary values for the subject

        Returns:
            RuleMatch with the score (None when missing), the rule that
            fired and every rule whose condition held

        Raises:
            ValueError: If the winning rule yields a score outside the
                table's scale
        """
        matched = [
            rule for rule in self.table.rules
            if rule.matches(inputs, self.min_comorbidities)
        ]
        missing = inputs.missing_fields(self.table.required_inputs)

        if missing or not matched:
            return RuleMatch(
                score=None,
                matched_rules=[r.number for r in matched],
                missing_inputs=missing,
            )

        winner = matched[0]
        score = winner.score_for(inputs)
        if score not in self.table.scores:
            raise ValueError(
                f"{self.table.version.value} rule {winner.number} produced score {score!r}, "
                f"expected one of {', '.join(self.table.scores)}"
            )
        return RuleMatch(
            score=score,
            rule_number=winner.number,
            matched_rules=[r.number for r in matched],
            missing_inputs=[],
        )

    def classify(self, inputs: FrailtyInputs) -> str | None:
        """Score one subject, returning only the score."""
        return self.evaluate(inputs).score

    def classify_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """Score every row of a frame holding the canonical input columns.

        Missing auxiliary columns are read as all-missing. Count columns are
        required.

        Returns:
            DataFrame indexed like df with cfs_score (string dtype, pd.NA
            when missing) and cfs_rule (Int64)
        """
        for column in (BALDS_COUNT_COLUMN, IADLS_COUNT_COLUMN, DISEASES_COUNT_COLUMN):
            if column not in df.columns:
                raise KeyError(f"Count column '{column}' missing; derive counts before classifying")

        # By position; labels outside the canonical inputs may repeat
        columns = [
            df[column].array if column in df.columns
            else pd.array([pd.NA] * len(df), dtype="Int64")
            for column in _INPUT_COLUMNS
        ]
        scores = []
        rules = []
        for row in zip(*columns):
            match = self.evaluate(FrailtyInputs.from_values(*row))
            scores.append(match.score)
            rules.append(match.rule_number)

        result = pd.DataFrame(
            {
                CFS_SCORE_COLUMN: pd.array(scores, dtype="string"),
                CFS_RULE_COLUMN: pd.array(rules, dtype="Int64"),
            },
            index=df.index,
        )

        classified = int(result[CFS_SCORE_COLUMN].notna().sum())
        logger.info(
            f"{self.table.version.value}: classified {classified}/{len(result)} rows "
            f"(min_comorbidities={self.min_comorbidities})"
        )
        return result
