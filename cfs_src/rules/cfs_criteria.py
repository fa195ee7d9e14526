"""Clinical Frailty Scale criteria reference data and constants.

Codes and thresholds shared by the cleaner, the rules engine and the
validator. The validator reads these constants, never the decision tables.

Reference: Rockwood K, et al. A global clinical measure of fitness and
frailty in elderly people. CMAJ 2005;173(5):489-495. Scale wording follows
the Clinical Frailty Scale version 2.0 (2020).
"""

# =============================================================================
# Survey Codes
# =============================================================================

# Reserved "don't know / refused" code in the source surveys. Always treated
# as missing, even where 9 would otherwise fall inside an indicator's domain.
MISSING_CODE = 9

# Value counted as "difficulty present" / "condition present"
POSITIVE_CODE = 1

BINARY_DOMAIN = frozenset({0, 1})

# n1: 0=Excellent, 1=Very good, 2=Good, 3=Fair, 4=Bad, 5=Very bad
GENERAL_HEALTH_DOMAIN = frozenset(range(0, 6))

# n73: 1=Never/rarely ... 4=Most of the time
DAILY_EFFORT_DOMAIN = frozenset(range(1, 5))

# l2: 1=More than once a week, 2=Once a week, 3=1-3 times/month, 4=Rarely/never
PHYSICAL_ACTIVITY_ORDINAL_DOMAIN = frozenset(range(1, 5))
PHYSICAL_ACTIVITY_BINARY_DOMAIN = BINARY_DOMAIN


# =============================================================================
# Physical Activity Conversion
#
# The 9-level table consumes a binary "physically active" flag while the
# survey records a 4-point frequency. Moderate activity at least weekly
# counts as active.
# =============================================================================

PHYSICALLY_ACTIVE_CODES = frozenset({1, 2})
PHYSICALLY_INACTIVE_CODES = frozenset({3, 4})


# =============================================================================
# Classification Thresholds
# =============================================================================

# Default threshold M for the comorbidity rule
DEFAULT_MIN_COMORBIDITIES = 10

# BALD difficulties at or above which a subject is severely frail
SEVERE_BALD_COUNT = 3

# IADL difficulties at or above which a subject without BALD difficulty is
# moderately frail
MODERATE_IADL_COUNT = 5

# Terminally ill subjects with at most this many BALD difficulties score 9,
# otherwise 8
TERMINAL_MAX_BALD_COUNT = 2

# General health codes treated as poor self-rated health (Bad, Very bad)
POOR_GENERAL_HEALTH = frozenset({4, 5})

# Daily effort code that forces score 4. n73 tops out at 4, so with a
# cleaned column this branch never fires; kept to match the published table.
MAX_DAILY_EFFORT_CODE = 5

# Score assigned to a complete record no rule recognises
FALLBACK_SCORE = "3"

CFS9_SCORES = tuple(str(n) for n in range(1, 10))
CFS7_SCORES = tuple(str(n) for n in range(1, 8))


# =============================================================================
# Canonical Output Columns
# =============================================================================

BALDS_COUNT_COLUMN = "balds_count"
IADLS_COUNT_COLUMN = "ialds_count"
DISEASES_COUNT_COLUMN = "diseases_count"

GENERAL_HEALTH_COLUMN = "general_health"
DAILY_EFFORT_COLUMN = "daily_effort"
PHYSICAL_ACTIVITY_COLUMN = "physical_activity"
TERMINALLY_ILL_COLUMN = "terminally_ill"

AUXILIARY_COLUMNS = (
    GENERAL_HEALTH_COLUMN,
    DAILY_EFFORT_COLUMN,
    PHYSICAL_ACTIVITY_COLUMN,
    TERMINALLY_ILL_COLUMN,
)

CFS_SCORE_COLUMN = "cfs_score"
CFS_RULE_COLUMN = "cfs_rule"
EXPECTED_CFS_COLUMN = "expected_cfs"
CHECK_PASS_COLUMN = "check_pass"
