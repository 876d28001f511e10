"""Completion percentage, submit readiness, ADL total and care tier."""

import pytest

from care_assessment.models import AssessmentDraft
from care_assessment.scoring import (
    ScoreAggregator,
    ThresholdCareTierClassifier,
    adl_total,
    completion_percentage,
)

from conftest import ALL_ADL_ONE, BASIC_INFO, MEMBER_ID


def _draft(**values):
    return AssessmentDraft(member_id=MEMBER_ID, **values)


class TestCompletionPercentage:

    def test_empty_draft_is_zero(self, catalog):
        assert completion_percentage(catalog.steps, _draft(), 0) == 0

    def test_counts_only_reached_steps(self, catalog):
        draft = _draft(**BASIC_INFO, **ALL_ADL_ONE)
        # Everything mandatory is filled, but the user is still on step 0
        assert completion_percentage(catalog.steps, draft, 0) == 13  # 1/8 = 12.5 -> 13

    def test_full_at_last_step(self, catalog):
        draft = _draft(**BASIC_INFO, **ALL_ADL_ONE)
        last = catalog.total_steps - 1
        assert completion_percentage(catalog.steps, draft, last) == 100

    def test_optional_steps_count_as_complete(self, catalog):
        draft = _draft(**BASIC_INFO, **ALL_ADL_ONE)
        ltci = catalog.index_of("ltci-grade")
        assert completion_percentage(catalog.steps, draft, ltci) == 75  # 6/8

    def test_non_decreasing_when_filling_in_order(self, catalog):
        agg = ScoreAggregator(catalog)
        draft = _draft()
        seen = [agg.completion_percentage(draft, 0)]
        fills = [BASIC_INFO] + [{k: 1} for k in ALL_ADL_ONE]
        for index, values in enumerate(fills):
            draft = draft.model_copy(update=values)
            seen.append(agg.completion_percentage(draft, index))
            seen.append(agg.completion_percentage(draft, index + 1))
        assert seen == sorted(seen), f"completion went backwards: {seen}"

    def test_out_of_range_presence_still_counts(self, catalog):
        # Completion looks at presence, not validity
        assert completion_percentage(catalog.steps, _draft(**BASIC_INFO), 0) == 13
        assert completion_percentage(
            catalog.steps, _draft(gender="F", birth_year=1), 0,
        ) == 13


class TestCanSubmit:

    def test_empty(self, catalog):
        assert not ScoreAggregator(catalog).can_submit(_draft())

    def test_all_mandatory_present(self, catalog):
        assert ScoreAggregator(catalog).can_submit(_draft(**BASIC_INFO, **ALL_ADL_ONE))

    def test_one_adl_missing(self, catalog):
        values = {**ALL_ADL_ONE, "toilet_level": None}
        assert not ScoreAggregator(catalog).can_submit(_draft(**BASIC_INFO, **values))

    def test_optional_fields_not_needed(self, catalog):
        draft = _draft(**BASIC_INFO, **ALL_ADL_ONE, ltci_grade=None, notes=None)
        assert ScoreAggregator(catalog).can_submit(draft)

    def test_can_complete_step(self, catalog):
        agg = ScoreAggregator(catalog)
        assert not agg.can_complete_step(1, _draft())
        assert agg.can_complete_step(1, _draft(mobility_level=2))


class TestAdlTotal:

    def test_incomplete_is_none(self):
        assert adl_total(_draft(mobility_level=1)) is None

    def test_sum(self):
        assert adl_total(_draft(mobility_level=1, eating_level=2, toilet_level=3,
                                communication_level=3)) == 9


class TestCareTier:

    THRESHOLDS = [(5, "light"), (8, "moderate"), (12, "heavy")]

    def test_no_classifier(self, catalog):
        assert ScoreAggregator(catalog).care_tier(_draft(**ALL_ADL_ONE)) is None

    def test_incomplete_levels(self, catalog):
        agg = ScoreAggregator(catalog, ThresholdCareTierClassifier(self.THRESHOLDS))
        assert agg.care_tier(_draft(mobility_level=3)) is None

    @pytest.mark.parametrize("levels,tier", [
        ((1, 1, 1, 1), "light"),
        ((1, 1, 1, 2), "light"),
        ((2, 2, 1, 1), "moderate"),
        ((2, 2, 2, 2), "moderate"),
        ((3, 3, 3, 3), "heavy"),
    ])
    def test_thresholds(self, levels, tier):
        assert ThresholdCareTierClassifier(self.THRESHOLDS).classify(levels) == tier

    def test_above_every_bound_falls_in_last_tier(self):
        classifier = ThresholdCareTierClassifier([(4, "a"), (6, "b")])
        assert classifier.classify((3, 3, 3, 3)) == "b"

    def test_empty_thresholds_rejected(self):
        with pytest.raises(ValueError):
            ThresholdCareTierClassifier([])

    def test_unsorted_thresholds_rejected(self):
        with pytest.raises(ValueError, match="sorted"):
            ThresholdCareTierClassifier([(8, "b"), (5, "a")])
