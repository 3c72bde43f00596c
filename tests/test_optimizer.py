"""Tests for the closest-load optimizer strategy."""

import time

import pytest

from lift_rotation.core.config import (
    OPTIMIZER_MAX_REP_SPAN,
    OPTIMIZER_MAX_SET_SPAN,
    PARTIAL_REPS_SEARCH_CAP,
)
from lift_rotation.core.models import DayExercise, GrowthSettings, PriorityRules
from lift_rotation.core.optimizer import (
    Candidate,
    best_partials,
    candidate_weights,
    consolidate_partials,
    enumerate_candidates,
    optimize,
    search_range,
    select_candidate,
    target_load,
)
from lift_rotation.core.progression import total_load


def _ex(weight: float = 100.0, reps: int = 10, sets: int = 3, partial: int = 0) -> DayExercise:
    return DayExercise(name="Squat", weight=weight, reps=reps, sets=sets, partial_reps=partial)


class TestTargetLoad:
    def test_linear_adds_amount_per_rep(self):
        # 3000 + 5 × 30
        growth = GrowthSettings(growth_type="linear", amount=5.0)
        assert target_load(_ex(), growth) == pytest.approx(3150.0)

    def test_percent_scales_current_load(self):
        growth = GrowthSettings(growth_type="percent", amount=10.0)
        assert target_load(_ex(), growth) == pytest.approx(3300.0)

    def test_exhausted_sigmoid_keeps_load(self):
        growth = GrowthSettings(growth_type="sigmoid", amount=1.0, decay_rate=0.5, iteration_count=4)
        assert target_load(_ex(), growth) == pytest.approx(3000.0)


class TestCandidateWeights:
    def test_steps_within_range(self):
        weights = candidate_weights(100.0, PriorityRules(weight_range=10.0, weight_increment=2.5))
        assert min(weights) == pytest.approx(90.0)
        assert max(weights) == pytest.approx(110.0)
        assert len(weights) == 9

    def test_never_non_positive(self):
        weights = candidate_weights(5.0, PriorityRules(weight_range=10.0, weight_increment=2.5))
        assert all(w > 0 for w in weights)

    def test_zero_increment_uses_unit_steps(self):
        weights = candidate_weights(50.0, PriorityRules(weight_range=3.0, weight_increment=0))
        assert weights == [47.0, 48.0, 49.0, 50.0, 51.0, 52.0, 53.0]


class TestSearchRange:
    def test_narrow_bounds_kept_whole(self):
        assert search_range(10, 8, 15, 20) == range(8, 16)

    def test_wide_bounds_window_around_current(self):
        assert search_range(100, 1, 1000, 20) == range(90, 110)

    def test_window_clamped_to_bounds(self):
        assert search_range(2, 1, 1000, 20) == range(1, 21)
        assert search_range(999, 1, 1000, 20) == range(981, 1001)

    def test_inverted_bounds_empty(self):
        assert list(search_range(10, 15, 8, 20)) == []


class TestBestPartials:
    def test_base_already_reaches_target(self):
        assert best_partials(3000.0, 100.0, 2950.0) == 0

    def test_fewest_that_reach_target(self):
        # 3000 + 100 × 2 = 3200 ≥ 3150, one partial is not enough
        assert best_partials(3000.0, 100.0, 3150.0) == 2

    def test_exact_hit(self):
        assert best_partials(2700.0, 90.0, 3150.0) == 5

    def test_cap_when_target_out_of_reach(self):
        assert best_partials(1000.0, 10.0, 5000.0) == PARTIAL_REPS_SEARCH_CAP


class TestEnumerateCandidates:
    def test_all_candidates_respect_bounds_and_ratio(self):
        rules = PriorityRules()
        candidates = list(enumerate_candidates(_ex(), rules, 3300.0))
        assert candidates
        for c in candidates:
            assert rules.rep_min <= c.reps <= rules.rep_max
            assert rules.set_min <= c.sets <= rules.set_max
            assert c.reps > rules.reps_to_sets_multiplier * c.sets
            assert 0 <= c.partials <= PARTIAL_REPS_SEARCH_CAP
            assert c.load == pytest.approx(c.weight * (c.reps * c.sets + c.partials))

    def test_inverted_bounds_give_nothing(self):
        assert list(enumerate_candidates(_ex(), PriorityRules(rep_min=15, rep_max=8), 3300.0)) == []

    def test_wide_bounds_stay_bounded(self):
        rules = PriorityRules(
            rep_min=1, rep_max=1000, set_min=1, set_max=100,
            reps_to_sets_multiplier=0, weight_range=50.0,
        )
        candidates = list(enumerate_candidates(_ex(), rules, 3300.0))
        weights = candidate_weights(100.0, rules)
        assert len(candidates) <= OPTIMIZER_MAX_REP_SPAN * OPTIMIZER_MAX_SET_SPAN * len(weights)
        assert any((c.reps, c.sets) == (10, 3) for c in candidates)


class TestSelectCandidate:
    def test_prefers_overshoot_within_tolerance(self):
        under = Candidate(10, 3, 100.0, 0, 990.0)
        over = Candidate(10, 3, 100.0, 0, 1020.0)
        assert select_candidate([under, over], 1000.0, 100.0, 0.5) is over

    def test_falls_back_to_closest_below(self):
        far = Candidate(8, 3, 100.0, 0, 800.0)
        near = Candidate(9, 3, 100.0, 0, 950.0)
        assert select_candidate([far, near], 1000.0, 100.0, 0.5) is near

    def test_tie_prefers_fewer_partials(self):
        a = Candidate(10, 3, 100.0, 2, 1000.0)
        b = Candidate(10, 3, 100.0, 0, 1000.0)
        assert select_candidate([a, b], 1000.0, 100.0, 0.5) is b

    def test_empty_pool(self):
        assert select_candidate([], 1000.0, 100.0, 0.5) is None


class TestConsolidatePartials:
    def test_folds_whole_sets(self):
        assert consolidate_partials(10, 3, 12, PriorityRules()) == (4, 2)

    def test_stops_at_ratio(self):
        # 8 reps cannot carry a 4th set (8 > 2 × 4 fails)
        assert consolidate_partials(8, 3, 20, PriorityRules()) == (3, 20)

    def test_stops_at_set_max(self):
        assert consolidate_partials(15, 5, 30, PriorityRules()) == (5, 30)


class TestOptimize:
    def test_hits_exact_target(self):
        # target 3150 → 105 × 10 × 3 is the only exact match without partials
        growth = GrowthSettings(growth_type="linear", amount=5.0)
        result = optimize(_ex(), PriorityRules(), growth)
        assert (result.weight, result.reps, result.sets, result.partial_reps) == (105.0, 10, 3, 0)

    def test_result_satisfies_constraints(self):
        rules = PriorityRules()
        growth = GrowthSettings(growth_type="percent", amount=7.0)
        result = optimize(_ex(97.5, 12, 4, 1), rules, growth)
        assert rules.rep_min <= result.reps <= rules.rep_max
        assert rules.set_min <= result.sets <= rules.set_max
        assert result.reps > rules.reps_to_sets_multiplier * result.sets
        assert abs(result.weight - 97.5) <= rules.weight_range
        assert total_load(result) >= target_load(_ex(97.5, 12, 4, 1), growth)

    def test_keeps_name_and_completed(self):
        ex = DayExercise(name="Row", weight=80, reps=10, sets=3, completed=True)
        result = optimize(ex, PriorityRules(), GrowthSettings())
        assert result.name == "Row"
        assert result.completed is True

    def test_inverted_bounds_return_unchanged(self):
        ex = _ex()
        assert optimize(ex, PriorityRules(set_min=5, set_max=3), GrowthSettings()) == ex

    def test_wide_bounds_finish_quickly(self):
        rules = PriorityRules(
            rep_min=1, rep_max=1000, set_min=1, set_max=100,
            reps_to_sets_multiplier=0, weight_range=50.0,
        )
        growth = GrowthSettings(growth_type="percent", amount=5.0)

        start = time.perf_counter()
        result = optimize(_ex(), rules, growth)
        elapsed = time.perf_counter() - start

        assert elapsed < 1.0
        assert rules.rep_min <= result.reps <= rules.rep_max
        assert rules.set_min <= result.sets <= rules.set_max
        assert abs(result.weight - 100.0) <= rules.weight_range
        assert total_load(result) >= target_load(_ex(), growth)

    def test_matches_exhaustive_search(self):
        # solving partials per combination picks what trying all 0..cap would
        rules = PriorityRules()
        growth = GrowthSettings(growth_type="percent", amount=7.0)
        ex = _ex(97.5, 12, 4, 1)
        target = target_load(ex, growth)

        exhaustive = [
            Candidate(c.reps, c.sets, c.weight, p, c.weight * c.reps * c.sets + c.weight * p)
            for c in enumerate_candidates(ex, rules, target)
            for p in range(PARTIAL_REPS_SEARCH_CAP + 1)
        ]
        expected = select_candidate(exhaustive, target, ex.weight, rules.over_estimate_tolerance)
        chosen = select_candidate(
            enumerate_candidates(ex, rules, target), target, ex.weight, rules.over_estimate_tolerance
        )
        assert (chosen.reps, chosen.sets, chosen.weight, chosen.partials) == (
            expected.reps, expected.sets, expected.weight, expected.partials,
        )
