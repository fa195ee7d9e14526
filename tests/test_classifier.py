"""End-to-end tests for classify_cfs.

Subjects are built from raw survey answers with non-canonical column names
("q_<id>") so every test exercises the variable map.
"""

import warnings

import pandas as pd
import pytest

from cfs_src.catalog import CATALOG, IndicatorGroup, group_ids
from cfs_src.classifier import classify_cfs, physical_activity_to_binary
from cfs_src.errors import (
    CFSWarning,
    ConfigurationError,
    OutOfDomainWarning,
    PhysicalActivityScaleWarning,
    UnknownColumnError,
    UnmappedVariableWarning,
)
from cfs_src.mapping import resolve_variable_map
from cfs_src.rules.cfs_criteria import (
    BALDS_COUNT_COLUMN,
    CFS_RULE_COLUMN,
    CFS_SCORE_COLUMN,
    DAILY_EFFORT_COLUMN,
    DISEASES_COUNT_COLUMN,
    GENERAL_HEALTH_COLUMN,
    IADLS_COUNT_COLUMN,
    PHYSICAL_ACTIVITY_COLUMN,
    TERMINALLY_ILL_COLUMN,
)

BALD_IDS = group_ids(IndicatorGroup.BALD)
IADL_IDS = group_ids(IndicatorGroup.IADL)
DISEASE_IDS = group_ids(IndicatorGroup.DISEASE)

FULL_MAP = {indicator_id: f"q_{indicator_id}" for indicator_id in CATALOG}


def make_subject(balds=0, iadls=0, diseases=0, health=1, effort=1, activity=1, terminal=0) -> dict:
    """Raw survey row with the first N items of each group answered yes."""
    row = {}
    for ids, positives in ((BALD_IDS, balds), (IADL_IDS, iadls), (DISEASE_IDS, diseases)):
        for n, indicator_id in enumerate(ids):
            row[f"q_{indicator_id}"] = 1 if n < positives else 0
    row["q_n1"] = health
    row["q_n73"] = effort
    row["q_l2"] = activity
    row["q_ti"] = terminal
    return row


def classify_quietly(df, variable_map=FULL_MAP, **kwargs) -> pd.DataFrame:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", CFSWarning)
        return classify_cfs(df, variable_map, **kwargs)


class TestClassifyScenarios:
    """Reference subjects through the full pipeline."""

    @pytest.fixture
    def survey(self):
        return pd.DataFrame(
            [
                make_subject(balds=4, health=2, effort=2, activity=1),       # severe BALD
                make_subject(balds=1, terminal=1),                           # terminal
                make_subject(diseases=12, health=0, effort=1, activity=1),   # multimorbid
                make_subject(diseases=2, health=1, effort=1, activity=2),    # very fit
                make_subject(diseases=2, health=9, effort=1, activity=1),    # health refused
                make_subject(health=1, effort=1, activity=3),                # inactive
            ],
            index=["A", "B", "C", "D", "E", "F"],
        )

    def test_scores(self, survey):
        result = classify_quietly(survey)

        assert result.loc["A", CFS_SCORE_COLUMN] == "7"
        assert result.loc["B", CFS_SCORE_COLUMN] == "9"
        assert result.loc["C", CFS_SCORE_COLUMN] == "4"
        assert result.loc["D", CFS_SCORE_COLUMN] == "1"
        assert pd.isna(result.loc["E", CFS_SCORE_COLUMN])
        assert result.loc["F", CFS_SCORE_COLUMN] == "2"

    def test_counts(self, survey):
        result = classify_quietly(survey)

        assert result[BALDS_COUNT_COLUMN].tolist() == [4, 1, 0, 0, 0, 0]
        assert result[IADLS_COUNT_COLUMN].tolist() == [0, 0, 0, 0, 0, 0]
        assert result[DISEASES_COUNT_COLUMN].tolist() == [0, 0, 12, 2, 2, 0]

    def test_canonical_columns_projected(self, survey):
        result = classify_quietly(survey)

        assert pd.isna(result.loc["E", GENERAL_HEALTH_COLUMN])
        assert result.loc["A", GENERAL_HEALTH_COLUMN] == 2
        assert result.loc["B", TERMINALLY_ILL_COLUMN] == 1
        # ordinal 2 -> active, ordinal 3 -> inactive
        assert result.loc["D", PHYSICAL_ACTIVITY_COLUMN] == 1
        assert result.loc["F", PHYSICAL_ACTIVITY_COLUMN] == 0
        # the mapped source column keeps its cleaned ordinal code
        assert result.loc["F", "q_l2"] == 3

    def test_score_dtype_and_index(self, survey):
        result = classify_quietly(survey)

        assert result[CFS_SCORE_COLUMN].dtype == "string"
        assert list(result.index) == list(survey.index)
        assert len(result) == len(survey)

    def test_input_not_modified(self, survey):
        before = survey.copy()
        classify_quietly(survey)

        pd.testing.assert_frame_equal(survey, before)
        assert CFS_SCORE_COLUMN not in survey.columns

    def test_include_rule(self, survey):
        result = classify_quietly(survey, include_rule=True)

        assert result.loc["A", CFS_RULE_COLUMN] == 2
        assert result.loc["B", CFS_RULE_COLUMN] == 1
        assert result.loc["D", CFS_RULE_COLUMN] == 8
        assert pd.isna(result.loc["E", CFS_RULE_COLUMN])

    def test_rule_column_omitted_by_default(self, survey):
        assert CFS_RULE_COLUMN not in classify_quietly(survey).columns

    def test_rows_are_independent(self, survey):
        """A subject scores the same alone and within the full table."""
        full = classify_quietly(survey)
        alone = classify_quietly(survey.loc[["C"]])

        assert alone.loc["C", CFS_SCORE_COLUMN] == full.loc["C", CFS_SCORE_COLUMN]

    def test_threshold_override(self, survey):
        result = classify_quietly(survey, min_comorbidities=2)

        assert result.loc["D", CFS_SCORE_COLUMN] == "4"

    def test_resolved_map_accepted(self, survey):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", CFSWarning)
            resolved = resolve_variable_map(survey.columns, FULL_MAP)

        result = classify_quietly(survey, resolved)

        assert result.loc["A", CFS_SCORE_COLUMN] == "7"


class TestPhysicalActivityScale:
    """Test handling of the ordinal and binary physical activity codings."""

    def test_conversion_warns(self):
        df = pd.DataFrame([make_subject()])

        with pytest.warns(PhysicalActivityScaleWarning):
            classify_cfs(df, FULL_MAP)

    def test_to_binary(self):
        values = pd.Series(pd.array([1, 2, 3, 4, None], dtype="Int64"))

        result = physical_activity_to_binary(values)

        assert result.iloc[:4].tolist() == [1, 1, 0, 0]
        assert pd.isna(result.iloc[4])

    def test_binary_column_with_cfs9(self):
        df = pd.DataFrame([make_subject(activity=1), make_subject(activity=0), make_subject(activity=3)])

        with warnings.catch_warnings():
            warnings.simplefilter("error", PhysicalActivityScaleWarning)
            warnings.simplefilter("ignore", UnmappedVariableWarning)
            warnings.simplefilter("ignore", OutOfDomainWarning)
            result = classify_cfs(df, FULL_MAP, physical_activity_scale="binary")

        assert result[CFS_SCORE_COLUMN].iloc[0] == "1"
        assert result[CFS_SCORE_COLUMN].iloc[1] == "2"
        # 3 is outside the binary domain -> missing activity -> no score
        assert pd.isna(result[CFS_SCORE_COLUMN].iloc[2])

    def test_binary_column_with_legacy_table_rejected(self):
        df = pd.DataFrame([make_subject()])

        with pytest.raises(ConfigurationError):
            classify_quietly(df, scale="cfs7_legacy", physical_activity_scale="binary")


class TestLegacyClassification:
    """Test classify_cfs with the 1-7 table."""

    def test_scores(self):
        df = pd.DataFrame([
            make_subject(balds=3, health=9, effort=9, activity=9, terminal=9),
            make_subject(health=0, effort=1, activity=2),
            make_subject(health=2, effort=3, activity=4),
            make_subject(health=4),
        ])

        result = classify_quietly(df, scale="cfs7_legacy")

        assert result[CFS_SCORE_COLUMN].tolist() == ["7", "1", "3", "4"]

    def test_ordinal_activity_not_converted(self):
        df = pd.DataFrame([make_subject(activity=4)])

        with warnings.catch_warnings():
            warnings.simplefilter("error", PhysicalActivityScaleWarning)
            warnings.simplefilter("ignore", UnmappedVariableWarning)
            result = classify_cfs(df, FULL_MAP, scale="cfs7_legacy")

        assert result.loc[0, PHYSICAL_ACTIVITY_COLUMN] == 4


class TestClassifyErrors:
    """Test configuration errors and degraded inputs."""

    def test_unknown_column(self):
        df = pd.DataFrame([make_subject()])

        with pytest.raises(UnknownColumnError):
            classify_quietly(df, {**FULL_MAP, "p40": "Dressing"})

    def test_unknown_scale(self):
        with pytest.raises(ConfigurationError):
            classify_quietly(pd.DataFrame([make_subject()]), scale="cfs12")

    def test_unknown_activity_scale(self):
        with pytest.raises(ConfigurationError):
            classify_quietly(pd.DataFrame([make_subject()]), physical_activity_scale="weekly")

    @pytest.mark.parametrize("threshold", [-1, 2.5, True, "10"])
    def test_bad_threshold(self, threshold):
        with pytest.raises(ConfigurationError):
            classify_quietly(pd.DataFrame([make_subject()]), min_comorbidities=threshold)

    def test_unmapped_terminal_illness_leaves_scores_missing(self):
        df = pd.DataFrame([make_subject(balds=4), make_subject()])
        partial = {k: v for k, v in FULL_MAP.items() if k != "ti"}

        result = classify_quietly(df, partial)

        assert result[CFS_SCORE_COLUMN].isna().all()
        assert result[TERMINALLY_ILL_COLUMN].isna().all()

    def test_no_map_counts_zero(self):
        df = pd.DataFrame([make_subject(balds=2)])

        with pytest.warns(UnmappedVariableWarning):
            result = classify_cfs(df)

        assert result.loc[0, BALDS_COUNT_COLUMN] == 0
        assert pd.isna(result.loc[0, CFS_SCORE_COLUMN])

    def test_empty_frame(self):
        df = pd.DataFrame(columns=list(make_subject()))

        result = classify_quietly(df)

        assert len(result) == 0
        assert CFS_SCORE_COLUMN in result.columns


class TestColumnNames:
    """Test input column names that overlap the canonical outputs."""

    def test_sources_named_after_other_canonical_columns(self):
        """Health stored in 'daily_effort' and effort in 'general_health' are not mixed up."""
        df = pd.DataFrame([make_subject(diseases=2, health=1, effort=3, activity=1)])
        df = df.rename(columns={"q_n1": DAILY_EFFORT_COLUMN, "q_n73": GENERAL_HEALTH_COLUMN})
        variable_map = {**FULL_MAP, "n1": DAILY_EFFORT_COLUMN, "n73": GENERAL_HEALTH_COLUMN}

        result = classify_quietly(df, variable_map, include_rule=True)

        assert result.loc[0, GENERAL_HEALTH_COLUMN] == 1
        assert result.loc[0, DAILY_EFFORT_COLUMN] == 3
        assert result.loc[0, CFS_SCORE_COLUMN] == "2"
        assert result.loc[0, CFS_RULE_COLUMN] == 7

    def test_source_with_canonical_name(self):
        df = pd.DataFrame([make_subject(health=2)]).rename(columns={"q_n1": GENERAL_HEALTH_COLUMN})

        result = classify_quietly(df, {**FULL_MAP, "n1": GENERAL_HEALTH_COLUMN})

        assert result.loc[0, GENERAL_HEALTH_COLUMN] == 2

    def test_unmapped_column_with_canonical_name_rejected(self):
        df = pd.DataFrame([make_subject()])
        df[GENERAL_HEALTH_COLUMN] = "patient comment"

        with pytest.raises(ConfigurationError, match=GENERAL_HEALTH_COLUMN):
            classify_quietly(df)

    def test_unrelated_duplicate_labels(self):
        df = pd.DataFrame([make_subject(), make_subject(balds=3)])
        notes = pd.DataFrame([["a", "b"], ["c", "d"]], columns=["note", "note"])
        df = pd.concat([df, notes], axis=1)

        result = classify_quietly(df)

        assert result[CFS_SCORE_COLUMN].tolist() == ["1", "7"]
        assert list(result.columns).count("note") == 2

    def test_duplicated_mapped_column_rejected(self):
        df = pd.DataFrame([make_subject()])
        df = pd.concat([df, df[["q_p40"]]], axis=1)

        with pytest.raises(ConfigurationError, match="q_p40"):
            classify_quietly(df)
