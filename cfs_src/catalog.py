"""Canonical CFS indicator catalog.

Each indicator has a fixed canonical id (the survey question code), the
question text shown during mapping, and the set of valid codes. Datasets
rarely use these ids as column names; see mapping.py for how ids are
resolved to actual columns.

Indicator groups:
- BALD: Basic Activities of Daily Living (p40, p46, p37, p49, p43)
- IADL: Instrumental Activities of Daily Living (p28, p26, p20, p30, p22, p33)
- DISEASE: Health conditions (n55, n54, n28, n35, n50, n46, n60, n63_2,
  n62, n63, n58, n56, n57, n52, n61)
- Auxiliary: general health (n1), daily effort (n73), physical activity
  (l2), terminally ill (ti)
"""

from dataclasses import dataclass
from enum import Enum

from .rules.cfs_criteria import (
    BINARY_DOMAIN,
    DAILY_EFFORT_DOMAIN,
    GENERAL_HEALTH_DOMAIN,
    PHYSICAL_ACTIVITY_ORDINAL_DOMAIN,
)


class IndicatorGroup(str, Enum):
    """Group an indicator contributes to."""
    BALD = "bald"
    IADL = "iadl"
    DISEASE = "disease"
    AUXILIARY = "auxiliary"


@dataclass(frozen=True)
class IndicatorDefinition:
    """A canonical CFS indicator."""
    id: str
    description: str
    domain: frozenset[int]
    group: IndicatorGroup


GENERAL_HEALTH_ID = "n1"
DAILY_EFFORT_ID = "n73"
PHYSICAL_ACTIVITY_ID = "l2"
TERMINALLY_ILL_ID = "ti"


def _binary(id: str, group: IndicatorGroup, description: str) -> IndicatorDefinition:
    return IndicatorDefinition(id, f"{description} (0=No, 1=Yes)", BINARY_DOMAIN, group)


def _bald(id: str, description: str) -> IndicatorDefinition:
    return _binary(id, IndicatorGroup.BALD, description)


def _iadl(id: str, description: str) -> IndicatorDefinition:
    return _binary(id, IndicatorGroup.IADL, description)


def _disease(id: str, description: str) -> IndicatorDefinition:
    return _binary(id, IndicatorGroup.DISEASE, description)


_DEFINITIONS = (
    # Basic Activities of Daily Living
    _bald("p40", "Dressing: Do you have any difficulty with DRESSING UP?"),
    _bald("p46", "Eating: Do you have any difficulty with EATING from a dish that was placed in front of you?"),
    _bald("p37", "Walking: Do you have any difficulty with GETTING ACROSS A ROOM OR WALKING FROM ONE ROOM TO ANOTHER on the same floor?"),
    _bald("p49", "Bed Transfer: Do you have any difficulty with GETTING IN OR OUT OF BED?"),
    _bald("p43", "Showering: Do you have any difficulty with SHOWERING?"),

    # Instrumental Activities of Daily Living
    _iadl("p28", "Telephone Use: Do you have any difficulty with USING TELEPHONE (LANDLINE OR CELLULAR)?"),
    _iadl("p26", "Shopping: Do you have any difficulty with DOING SHOPPING?"),
    _iadl("p20", "Meal Prep: Do you have any difficulty with preparing A HOT MEAL?"),
    _iadl("p30", "Medication Management: Do you have any difficulty with TAKING/MANAGING YOUR OWN MEDICATIONS?"),
    _iadl("p22", "Financial Management: Do you have any difficulty with MANAGING YOUR OWN MONEY?"),
    _iadl("p33", "Light Housekeeping: Do you have any difficulty with PERFORMING LIGHT HOUSEKEEPING (making your own bed, removing dust, taking care of the garbage etc.)?"),

    # Health conditions
    _disease("n55", "COPD: Has a doctor ever told you that you have emphysema, chronic bronchitis or chronic obstructive pulmonary disease (COPD)?"),
    _disease("n54", "Asthma: Has a doctor ever told you that you have asthma?"),
    _disease("n28", "Hypertension: Has any doctor ever told you that you have arterial hypertension (high blood pressure)?"),
    _disease("n35", "Diabetes: Has any doctor ever told you that you have diabetes ('high blood sugar')?"),
    _disease("n50", "Heart Failure: Has any doctor ever told you that you have a heart failure?"),
    _disease("n46", "Heart Attack: Has any doctor ever told you that you had a heart attack?"),
    _disease("n60", "Cancer: Has a doctor ever told you that you have or had cancer?"),
    _disease("n63_2", "Memory/Dementia (non-Alzheimer's): Has a doctor ever told you that you have a serious memory problem or dementia? (excludes Alzheimer's disease)"),
    _disease("n62", "Parkinson's: Has a doctor ever told you that you have Parkinson's disease?"),
    _disease("n63", "Alzheimer's: Has a doctor ever told you that you have Alzheimer's disease?"),
    _disease("n58", "Chronic Column Problem: Has a doctor ever told you that you have chronic column problem, such as back pain, neck pain, low back pain, sciatica pain, issues in vertebrae or disc?"),
    _disease("n56", "Arthritis/Rheumatism: Has a doctor ever told you that you have arthritis or rheumatism?"),
    _disease("n57", "Osteoporosis: Has a doctor ever told you that you have osteoporosis?"),
    _disease("n52", "Stroke: Has a doctor ever told you that you had a cerebral vascular accident (stroke)?"),
    _disease("n61", "Chronic Renal Failure: Has a doctor ever told you that you have chronic renal failure?"),

    # Auxiliary indicators
    IndicatorDefinition(
        GENERAL_HEALTH_ID,
        "General Health: In general, how would you evaluate your health? "
        "(0=Excellent, 1=Very good, 2=Good, 3=Fair, 4=Bad, 5=Very bad)",
        GENERAL_HEALTH_DOMAIN,
        IndicatorGroup.AUXILIARY,
    ),
    IndicatorDefinition(
        DAILY_EFFORT_ID,
        "Daily Activities Effort: In the LAST WEEK, how often have your daily activities "
        "required a big effort from you to be performed? (1=Never/rarely (less than 1 day), "
        "2=Very few times (1-2 days), 3=Sometimes (3-4 days), 4=Most of the time)",
        DAILY_EFFORT_DOMAIN,
        IndicatorGroup.AUXILIARY,
    ),
    IndicatorDefinition(
        PHYSICAL_ACTIVITY_ID,
        "Physical Activity: How often do you do moderate physical activities, such as "
        "gardening, washing the car, walking at moderate speed, dancing, or doing stretching "
        "exercises? (1=More than once a week, 2=Once a week, 3=1 to 3 times a month, "
        "4=Rarely or never)",
        PHYSICAL_ACTIVITY_ORDINAL_DOMAIN,
        IndicatorGroup.AUXILIARY,
    ),
    _binary(
        TERMINALLY_ILL_ID,
        IndicatorGroup.AUXILIARY,
        "Terminal Illness: Has a doctor told you that you are terminally ill, with a life "
        "expectancy of less than 6 months?",
    ),
)

CATALOG: dict[str, IndicatorDefinition] = {d.id: d for d in _DEFINITIONS}

AUXILIARY_IDS = (GENERAL_HEALTH_ID, DAILY_EFFORT_ID, PHYSICAL_ACTIVITY_ID, TERMINALLY_ILL_ID)


def get_indicator(indicator_id: str) -> IndicatorDefinition:
    """Look up a canonical indicator by id.

    Raises:
        KeyError: If the id is not in the catalog
    """
    return CATALOG[indicator_id]


def group_ids(group: IndicatorGroup) -> list[str]:
    """Canonical ids belonging to a group, in catalog order."""
    return [d.id for d in _DEFINITIONS if d.group == group]
