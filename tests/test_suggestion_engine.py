"""
Tests for the set suggestion engine — decision table, clamping, trends, deload checks.
Run: pytest tests/ -v
"""
import itertools

import pytest


def _suggest(**overrides):
    from src.suggestion_engine import get_suggestion_engine
    params = {
        "difficulty": "perfect",
        "form_quality": "perfect",
        "current_weight": 60,
        "current_reps": 8,
        "target_reps": 8,
        "is_compound": True,
    }
    params.update(overrides)
    return get_suggestion_engine().generate_suggestion(params)


# ═══════════════════════════════════════════════════════════════════════
# DECISION TABLE
# ═══════════════════════════════════════════════════════════════════════

class TestTooEasy:

    def test_perfect_form_adds_heavy_increment(self):
        s = _suggest(difficulty="too_easy", form_quality="perfect")
        assert s.next_weight == 65
        assert "increasing" in s.reasoning.lower()

    def test_isolation_heavy_increment(self):
        s = _suggest(difficulty="too_easy", form_quality="perfect", current_weight=20, is_compound=False)
        assert s.next_weight == 22.5

    def test_imperfect_form_adds_reps_not_load(self):
        s = _suggest(difficulty="too_easy", form_quality="good")
        assert s.next_weight == 60
        assert s.next_reps == 10
        assert s.form_tips

    def test_poor_form_gets_correction_tips(self):
        s = _suggest(difficulty="too_easy", form_quality="poor")
        assert s.next_weight == 60
        assert "Record yourself to check form" in s.form_tips


class TestEasy:

    def test_perfect_form_adds_light_increment(self):
        s = _suggest(difficulty="easy", form_quality="perfect")
        assert s.next_weight == 62.5
        assert "small weight increase" in s.reasoning

    def test_isolation_light_increment_rounds_to_quarter(self):
        s = _suggest(difficulty="easy", form_quality="perfect", current_weight=20, is_compound=False)
        assert s.next_weight == 21.25

    def test_imperfect_form_adds_one_rep(self):
        s = _suggest(difficulty="easy", form_quality="good")
        assert s.next_weight == 60
        assert s.next_reps == 9


class TestPerfect:

    def test_maintains_weight_and_reps(self):
        s = _suggest()
        assert s.next_weight == 60
        assert s.next_reps == 8
        assert "maintain" in s.reasoning.lower()
        assert s.form_tips is None

    def test_good_form_gets_tips_only(self):
        s = _suggest(form_quality="good")
        assert s.next_weight == 60
        assert s.form_tips is not None
        assert len(s.form_tips) == 2


class TestChallenging:

    def test_poor_form_reduces_and_warns(self):
        s = _suggest(difficulty="challenging", form_quality="poor")
        assert s.next_weight == 57.5
        assert s.next_reps == 7
        assert any("form breakdown" in w.lower() for w in s.warnings)

    def test_acceptable_form_holds_and_adds_rest(self):
        s = _suggest(difficulty="challenging", form_quality="good")
        assert s.next_weight == 60
        assert s.next_reps == 8
        # base 120 + challenging offset 30 + extra 30
        assert s.rest_seconds == 180


class TestFailure:

    def test_reference_case(self):
        s = _suggest(difficulty="failure", form_quality="poor", current_weight=60, current_reps=5, target_reps=8)
        assert s.next_weight == 55
        assert s.rest_seconds > 120
        assert s.warnings

    def test_reps_pulled_toward_target(self):
        s = _suggest(difficulty="failure", current_reps=10, target_reps=8)
        assert s.next_reps == 8

    def test_rep_drop_is_capped_at_two(self):
        s = _suggest(difficulty="failure", current_reps=12, target_reps=8)
        assert s.next_reps == 10

    def test_reps_never_raised_on_failure(self):
        s = _suggest(difficulty="failure", current_reps=5, target_reps=8)
        assert s.next_reps == 5

    def test_weight_never_negative(self):
        s = _suggest(difficulty="failure", current_weight=2)
        assert s.next_weight == 0


# ═══════════════════════════════════════════════════════════════════════
# REST & CLAMPING
# ═══════════════════════════════════════════════════════════════════════

class TestRestTime:

    @pytest.mark.parametrize("difficulty,compound,expected", [
        ("too_easy", True, 90),
        ("easy", True, 105),
        ("perfect", True, 120),
        ("perfect", False, 90),
        ("failure", False, 150),
    ])
    def test_offsets(self, difficulty, compound, expected):
        from src.suggestion_engine import SuggestionEngine
        assert SuggestionEngine.calculate_rest_time(difficulty, compound) == expected


class TestClamping:

    def test_zero_reps_treated_as_one(self):
        s = _suggest(current_reps=0, target_reps=0)
        assert s.next_reps == 1

    def test_negative_weight_treated_as_zero(self):
        s = _suggest(current_weight=-10)
        assert s.next_weight == 0

    def test_reps_capped_at_target_plus_three(self):
        s = _suggest(current_reps=20, target_reps=5)
        assert s.next_reps == 8

    def test_camel_case_input(self):
        from src.suggestion_engine import generate_suggestion
        s = generate_suggestion({
            "difficulty": "too_easy", "formQuality": "perfect",
            "currentWeight": 60, "currentReps": 8, "targetReps": 8, "isCompound": True,
        })
        assert s.next_weight == 65


class TestSuggestionProperties:
    """Invariants over every (difficulty, form) pair."""

    def test_weight_and_reps_bounds(self):
        from src.models import Difficulty, FormQuality
        for difficulty, form in itertools.product(Difficulty, FormQuality):
            for weight, reps, target in [(0, 1, 1), (1.1, 3, 8), (33.3, 12, 10), (60, 8, 8), (100, 20, 5)]:
                s = _suggest(difficulty=difficulty.value, form_quality=form.value,
                             current_weight=weight, current_reps=reps, target_reps=target)
                assert s.next_weight >= 0
                assert s.next_weight * 4 == int(s.next_weight * 4), (difficulty, form, weight)
                assert 1 <= s.next_reps <= target + 3, (difficulty, form, reps, target)

    def test_poor_form_never_adds_load_before_failure(self):
        from src.models import Difficulty
        for difficulty in Difficulty:
            s = _suggest(difficulty=difficulty.value, form_quality="poor")
            assert s.next_weight <= 60


class TestSuggestionRecord:

    def test_record_shape(self):
        record = _suggest(difficulty="failure").to_record()
        assert record["next_weight"] == 55
        assert "timestamp" in record
        assert "form_tips" not in record  # None fields are dropped


# ═══════════════════════════════════════════════════════════════════════
# TRENDS & DELOAD
# ═══════════════════════════════════════════════════════════════════════

def _sets(ratings: list[tuple]) -> list[dict]:
    """Helper: [(difficulty, form), ...] → set dicts."""
    return [{"weight": 60, "reps": 8, "difficulty": d, "form_quality": f} for d, f in ratings]


class TestProgressionTrend:

    def test_improving(self):
        from src.suggestion_engine import get_suggestion_engine
        result = get_suggestion_engine().analyze_progression_trend(_sets([
            ("too_easy", "good"), ("easy", "good"), ("perfect", "perfect"),
        ]))
        assert result["trend"] == "improving"

    def test_declining_difficulty(self):
        from src.suggestion_engine import get_suggestion_engine
        result = get_suggestion_engine().analyze_progression_trend(_sets([
            ("perfect", "good"), ("easy", "good"), ("too_easy", "good"),
        ]))
        assert result["trend"] == "declining"

    def test_form_degradation_blocks_improving(self):
        from src.suggestion_engine import get_suggestion_engine
        result = get_suggestion_engine().analyze_progression_trend(_sets([
            ("easy", "perfect"), ("easy", "good"), ("perfect", "poor"),
        ]))
        assert result["trend"] == "declining"

    def test_mixed_is_maintaining(self):
        from src.suggestion_engine import get_suggestion_engine
        result = get_suggestion_engine().analyze_progression_trend(_sets([
            ("easy", "good"), ("perfect", "good"), ("easy", "good"),
        ]))
        assert result["trend"] == "maintaining"

    def test_too_few_sets(self):
        from src.suggestion_engine import get_suggestion_engine
        result = get_suggestion_engine().analyze_progression_trend(_sets([
            ("too_easy", "good"), ("easy", "good"),
        ]))
        assert result["trend"] == "maintaining"
        assert "low confidence" in result["recommendation"]


class TestShouldDeload:

    def _sessions(self, ratings):
        return [{"overall_difficulty": d, "form_quality": f} for d, f in ratings]

    def test_fatigue(self):
        from src.suggestion_engine import get_suggestion_engine
        result = get_suggestion_engine().should_deload(self._sessions([
            ("challenging", "good"), ("failure", "good"), ("perfect", "good"),
        ]))
        assert result["should_deload"] is True
        assert "fatigue" in result["reason"]

    def test_technical_breakdown(self):
        from src.suggestion_engine import get_suggestion_engine
        result = get_suggestion_engine().should_deload(self._sessions([
            ("perfect", "poor"), ("easy", "poor"), ("perfect", "good"),
        ]))
        assert result["should_deload"] is True
        assert "Form" in result["reason"]

    def test_fresh_athlete(self):
        from src.suggestion_engine import get_suggestion_engine
        result = get_suggestion_engine().should_deload(self._sessions([
            ("perfect", "good"), ("easy", "perfect"), ("challenging", "good"),
        ]))
        assert result == {"should_deload": False}

    def test_too_few_sessions(self):
        from src.suggestion_engine import get_suggestion_engine
        result = get_suggestion_engine().should_deload(self._sessions([
            ("failure", "poor"), ("failure", "poor"),
        ]))
        assert result["should_deload"] is False


class TestSingleton:

    def test_same_instance(self):
        from src.suggestion_engine import get_suggestion_engine
        assert get_suggestion_engine() is get_suggestion_engine()
