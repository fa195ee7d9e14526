"""Versioned CFS decision tables.

Each table is an ordered tuple of Rule rows evaluated top to bottom; the
first matching row decides the score. Rows are written as plain predicates
over FrailtyInputs so each one can be tested in isolation.

CFS9_TABLE (current, 1-9):
    1. Terminally ill                               -> 9 (b <= 2) or 8
    2. BALD >= 3                                    -> 7
    3. BALD 1-2, or BALD 0 and IADL >= 5            -> 6
    4. BALD 0 and IADL 1-4                          -> 5
    5. No ADL/IADL difficulty and (comorbidities >= M or poor health
       or maximal effort)                           -> 4
    6-8. Mild spectrum by health, effort, activity  -> 3 / 2 / 1
    9. Complete record matching nothing else        -> 3

CFS7_LEGACY_TABLE (historical, 1-7): same severity ladder without terminal
illness, mild spectrum keyed on general health 0 / 1-2 / 3-5 with the
4-point physical activity scale, no fallback and no completeness gate.
"""

from .cfs_criteria import (
    CFS7_SCORES,
    CFS9_SCORES,
    FALLBACK_SCORE,
    MAX_DAILY_EFFORT_CODE,
    MODERATE_IADL_COUNT,
    POOR_GENERAL_HEALTH,
    SEVERE_BALD_COUNT,
    TERMINAL_MAX_BALD_COUNT,
)
from .schemas import (
    CFSScaleVersion,
    DecisionTable,
    FrailtyInputs,
    PhysicalActivityScale,
    Rule,
)


# =============================================================================
# Shared predicates
# =============================================================================

def _severe_balds(x: FrailtyInputs, m: int) -> bool:
    return x.balds_count >= SEVERE_BALD_COUNT


def _moderate(x: FrailtyInputs, m: int) -> bool:
    return x.balds_count in (1, 2) or (
        x.balds_count == 0 and x.ialds_count >= MODERATE_IADL_COUNT
    )


def _iadl_only(x: FrailtyInputs, m: int) -> bool:
    return x.balds_count == 0 and 1 <= x.ialds_count <= MODERATE_IADL_COUNT - 1


def _no_adl_difficulty(x: FrailtyInputs) -> bool:
    return x.balds_count == 0 and x.ialds_count == 0


def _mild_base(x: FrailtyInputs, m: int) -> bool:
    """No ADL/IADL difficulty and below the comorbidity threshold."""
    return _no_adl_difficulty(x) and x.diseases_count < m


# =============================================================================
# CFS 1-9
# =============================================================================

def _terminal_score(x: FrailtyInputs) -> str:
    return "9" if x.balds_count <= TERMINAL_MAX_BALD_COUNT else "8"


def _cfs9_vulnerable(x: FrailtyInputs, m: int) -> bool:
    return _no_adl_difficulty(x) and (
        x.diseases_count >= m
        or x.general_health in POOR_GENERAL_HEALTH
        or x.daily_effort == MAX_DAILY_EFFORT_CODE
    )


def _cfs9_managing_well(x: FrailtyInputs, m: int) -> bool:
    if not _mild_base(x, m) or x.physical_activity != 0:
        return False
    return (x.general_health == 1 and x.daily_effort in (3, 4)) or (
        x.general_health in (2, 3) and x.daily_effort in (1, 2, 3, 4)
    )


def _cfs9_fit(x: FrailtyInputs, m: int) -> bool:
    if not _mild_base(x, m):
        return False
    gh, e, p = x.general_health, x.daily_effort, x.physical_activity
    return (
        (gh == 1 and e in (3, 4) and p == 1)
        or (gh in (2, 3) and e in (1, 2, 3, 4) and p == 1)
        or (gh == 1 and e in (1, 2) and p == 0)
    )


def _cfs9_very_fit(x: FrailtyInputs, m: int) -> bool:
    return (
        _mild_base(x, m)
        and x.general_health == 1
        and x.daily_effort in (1, 2)
        and x.physical_activity == 1
    )


def _always(x: FrailtyInputs, m: int) -> bool:
    return True


CFS9_TABLE = DecisionTable(
    version=CFSScaleVersion.CFS9,
    description="Clinical Frailty Scale 1-9",
    scores=CFS9_SCORES,
    required_inputs=("general_health", "daily_effort", "physical_activity", "terminally_ill"),
    physical_activity_scale=PhysicalActivityScale.BINARY,
    rules=(
        Rule(1, "Terminally ill", lambda x, m: x.terminally_ill == 1, _terminal_score),
        Rule(2, "Three or more BALD difficulties", _severe_balds, "7"),
        Rule(3, "One or two BALD difficulties, or five or more IADL difficulties", _moderate, "6"),
        Rule(4, "One to four IADL difficulties", _iadl_only, "5"),
        Rule(5, "Comorbidity threshold, poor health or maximal effort", _cfs9_vulnerable, "4"),
        Rule(6, "Managing well: inactive with good to fair health", _cfs9_managing_well, "3"),
        Rule(7, "Fit", _cfs9_fit, "2"),
        Rule(8, "Very fit: very good health, little effort, active", _cfs9_very_fit, "1"),
        Rule(9, "Complete record with no specific match", _always, FALLBACK_SCORE),
    ),
)


# =============================================================================
# Legacy CFS 1-7
# =============================================================================

def _legacy_mild(gh_codes, effort_codes=None, activity_codes=None):
    """Build a mild-spectrum predicate keyed on health/effort/activity."""
    def predicate(x: FrailtyInputs, m: int) -> bool:
        if not _mild_base(x, m):
            return False
        if x.general_health not in gh_codes:
            return False
        if effort_codes is not None and x.daily_effort not in effort_codes:
            return False
        return activity_codes is None or x.physical_activity in activity_codes
    return predicate


_REGULAR = (1, 2, 3)
_RARELY = (4,)

CFS7_LEGACY_TABLE = DecisionTable(
    version=CFSScaleVersion.CFS7_LEGACY,
    description="Clinical Frailty Scale 1-7 (legacy)",
    scores=CFS7_SCORES,
    physical_activity_scale=PhysicalActivityScale.ORDINAL,
    rules=(
        Rule(1, "Three or more BALD difficulties", _severe_balds, "7"),
        Rule(2, "One or two BALD difficulties", lambda x, m: x.balds_count in (1, 2), "6"),
        Rule(
            3,
            "No BALD difficulty and five or more IADL difficulties",
            lambda x, m: x.balds_count == 0 and x.ialds_count >= MODERATE_IADL_COUNT,
            "6",
        ),
        Rule(4, "One to four IADL difficulties", _iadl_only, "5"),
        Rule(
            5,
            "Comorbidity threshold reached",
            lambda x, m: _no_adl_difficulty(x) and x.diseases_count >= m,
            "4",
        ),
        Rule(6, "Excellent health but effort most of the time", _legacy_mild((0,), (4,)), "4"),
        Rule(7, "Excellent health, no effort, active", _legacy_mild((0,), (1,), _REGULAR), "1"),
        Rule(8, "Excellent health, no effort, rarely active", _legacy_mild((0,), (1,), _RARELY), "2"),
        Rule(9, "Excellent health, some effort, active", _legacy_mild((0,), (2, 3), _REGULAR), "2"),
        Rule(10, "Excellent health, some effort, rarely active", _legacy_mild((0,), (2, 3), _RARELY), "3"),
        Rule(11, "Good health, no effort, active", _legacy_mild((1, 2), (1,), _REGULAR), "2"),
        Rule(12, "Good health, no effort, rarely active", _legacy_mild((1, 2), (1,), _RARELY), "3"),
        Rule(13, "Good health, some effort, active", _legacy_mild((1, 2), (2, 3), _REGULAR), "2"),
        Rule(14, "Good health, some effort, rarely active", _legacy_mild((1, 2), (2, 3), _RARELY), "3"),
        Rule(15, "Fair to very bad health", _legacy_mild((3, 4, 5)), "4"),
    ),
)


DECISION_TABLES = {
    CFSScaleVersion.CFS9: CFS9_TABLE,
    CFSScaleVersion.CFS7_LEGACY: CFS7_LEGACY_TABLE,
}


def get_decision_table(version: CFSScaleVersion | str) -> DecisionTable:
    """Look up a decision table by version.

    Raises:
        ValueError: If the version is unknown
    """
    return DECISION_TABLES[CFSScaleVersion(version)]
