"""Tests for the two one-sided tests equivalence engine."""

import pytest
from scipy import stats

from cushionstats.analysis.equivalence import EquivalenceTestEngine, welch_df
from cushionstats.analysis.grouping import GroupIndexer
from cushionstats.analysis.reshape import LongFormReshaper
from cushionstats.analysis.summary import SummaryStatsCalculator
from cushionstats.core.entities import GroupKey, Measurement
from cushionstats.exceptions import (
    ConfigurationError,
    InsufficientData,
    InsufficientSample,
    SchemaConflict,
)

FOAM_A = [10.1, 10.3, 9.9, 10.0]
FOAM_B = [10.5, 10.6, 10.4, 10.7]


def build_index(tables):
    return GroupIndexer().build(LongFormReshaper().to_long(tables))


def single_group(samples: dict[str, list[float]], variable="hysteresis", level="L1"):
    measurements = [
        Measurement(variable, f"{foam}-{i}", foam, level, value)
        for foam, values in samples.items()
        for i, value in enumerate(values)
    ]
    (group,) = GroupIndexer().build(measurements)
    return group


class TestTestGroup:
    def test_clear_difference_is_not_equivalent(self):
        group = single_group({"EN40-230": FOAM_A, "EN50-250": FOAM_B})

        result = EquivalenceTestEngine().test_group(group)

        assert result.foam_a == "EN40-230"
        assert result.foam_b == "EN50-250"
        assert result.difference == pytest.approx(10.075 - 10.55)
        assert result.difference_p < 0.05
        assert result.is_significant_difference is True
        assert result.is_equivalent is False
        assert result.classification == "different"

    def test_difference_p_matches_welch_ttest(self):
        group = single_group({"EN40-230": FOAM_A, "EN50-250": FOAM_B})

        result = EquivalenceTestEngine().test_group(group)

        expected = stats.ttest_ind(FOAM_A, FOAM_B, equal_var=False)
        assert result.difference_p == pytest.approx(expected.pvalue, abs=1e-6)
        assert result.t_statistic == pytest.approx(expected.statistic)

    def test_equivalence_bound_is_fraction_of_group_mean(self):
        group = single_group({"EN40-230": FOAM_A, "EN50-250": FOAM_B})

        result = EquivalenceTestEngine().test_group(group)

        assert result.equivalence_bound == pytest.approx(10.3125 / 20)

    def test_one_sided_p_values_match_shifted_welch_tests(self):
        group = single_group({"EN40-230": FOAM_A, "EN50-250": FOAM_B})
        bound = 10.3125 / 20

        result = EquivalenceTestEngine().test_group(group)

        lower = stats.ttest_ind(
            [v + bound for v in FOAM_A], FOAM_B, equal_var=False, alternative="greater"
        )
        upper = stats.ttest_ind(
            [v - bound for v in FOAM_A], FOAM_B, equal_var=False, alternative="less"
        )
        assert result.eq_lower_p == pytest.approx(lower.pvalue)
        assert result.eq_upper_p == pytest.approx(upper.pvalue)
        # the shifted difference barely clears the lower margin
        assert 0.05 < result.eq_lower_p < 0.5
        assert result.eq_upper_p < 1e-3

    def test_nearly_identical_foams_are_equivalent(self, hysteresis_rows):
        index = build_index({"hysteresis": hysteresis_rows})

        result = EquivalenceTestEngine().test_group(index.group("hysteresis", "L2"))

        assert result.is_equivalent is True
        assert result.is_significant_difference is False
        assert result.classification == "equivalent"
        assert result.ci_lower > -result.equivalence_bound
        assert result.ci_upper < result.equivalence_bound

    def test_swapping_foams_mirrors_the_result(self):
        group = single_group({"EN40-230": FOAM_A, "EN50-250": FOAM_B})

        forward = EquivalenceTestEngine().test_group(group)
        reverse = EquivalenceTestEngine(foams=("EN50-250", "EN40-230")).test_group(group)

        assert reverse.difference == pytest.approx(-forward.difference)
        assert reverse.difference_p == pytest.approx(forward.difference_p)
        assert reverse.eq_lower_p == pytest.approx(forward.eq_upper_p)
        assert reverse.eq_upper_p == pytest.approx(forward.eq_lower_p)
        assert reverse.is_equivalent == forward.is_equivalent

    def test_welch_degrees_of_freedom(self):
        group = single_group({"EN40-230": FOAM_A, "EN50-250": FOAM_B})
        calculator = SummaryStatsCalculator()

        result = EquivalenceTestEngine().test_group(group)

        expected = welch_df(calculator.describe(FOAM_A), calculator.describe(FOAM_B))
        assert result.df == pytest.approx(expected)
        assert 3 < result.df < 6

    def test_pooled_variance_option(self):
        group = single_group({"EN40-230": FOAM_A, "EN50-250": FOAM_B})

        result = EquivalenceTestEngine(equal_var=True).test_group(group)

        expected = stats.ttest_ind(FOAM_A, FOAM_B, equal_var=True)
        assert result.difference_p == pytest.approx(expected.pvalue)
        assert result.df == 6

    def test_negative_means_use_positive_bound(self):
        group = single_group({"A": [-5.0, -5.1, -4.9], "B": [-5.05, -4.95, -5.0]})

        result = EquivalenceTestEngine().test_group(group)

        assert result.equivalence_bound > 0

    def test_single_observation_raises(self):
        group = single_group({"A": [1.0, 1.1, 0.9], "B": [1.0]})

        with pytest.raises(InsufficientSample, match="foam B has 1 observation"):
            EquivalenceTestEngine().test_group(group)

    def test_single_foam_raises(self):
        group = single_group({"A": [1.0, 1.1, 0.9]})

        with pytest.raises(InsufficientSample, match="two are needed"):
            EquivalenceTestEngine().test_group(group)

    def test_three_foams_need_explicit_pair(self):
        samples = {"A": [1.0, 1.2], "B": [1.1, 1.3], "C": [0.9, 1.4]}
        group = single_group(samples)

        with pytest.raises(SchemaConflict):
            EquivalenceTestEngine().test_group(group)

        result = EquivalenceTestEngine(foams=("A", "C")).test_group(group)
        assert (result.foam_a, result.foam_b) == ("A", "C")

    def test_zero_variance_raises(self):
        group = single_group({"A": [2.0, 2.0], "B": [3.0, 3.0]})

        with pytest.raises(InsufficientData, match="zero variance"):
            EquivalenceTestEngine().test_group(group)


class TestEngineConfiguration:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"alpha": 0.0},
            {"alpha": 0.5},
            {"equivalence_fraction": 0.0},
            {"foams": ("A",)},
            {"foams": ("A", "A")},
            {"max_workers": 0},
        ],
    )
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ConfigurationError):
            EquivalenceTestEngine(**kwargs)

    def test_wider_fraction_makes_equivalence_easier(self):
        group = single_group({"EN40-230": FOAM_A, "EN50-250": FOAM_B})

        result = EquivalenceTestEngine(equivalence_fraction=0.2).test_group(group)

        assert result.is_equivalent is True
        assert result.classification == "different and equivalent"


class TestRun:
    def test_failed_group_does_not_abort_others(self, hysteresis_rows, lcdod_rows):
        index = build_index({"hysteresis": hysteresis_rows, "lcdod": lcdod_rows})

        outcomes = EquivalenceTestEngine().run(index)

        assert [o.key for o in outcomes] == index.keys()
        failed = [o for o in outcomes if not o.ok]
        assert [o.key for o in failed] == [GroupKey("lcdod", "L3")]
        assert failed[0].failure.kind == "InsufficientSample"
        assert all(o.result is not None for o in outcomes if o.ok)

    def test_parallel_run_matches_sequential(self, hysteresis_rows, lcdod_rows):
        index = build_index({"hysteresis": hysteresis_rows, "lcdod": lcdod_rows})

        sequential = EquivalenceTestEngine().run(index)
        parallel = EquivalenceTestEngine(max_workers=4).run(index)

        assert parallel == sequential

    def test_empty_index(self):
        assert EquivalenceTestEngine().run(GroupIndexer().build([])) == []
