"""
Periodization Engine — Set Suggestion Engine

Rule-based next-set recommendations from one completed set's difficulty
and form rating, plus multi-set trend and deload-readiness checks.
Stateless: every call takes a full snapshot of its inputs.
"""
from typing import Optional

from src.config import (
    HEAVY_INCREMENT,
    LIGHT_INCREMENT,
    MAX_REPS_OVER_TARGET,
    BASE_REST_SECONDS,
    REST_OFFSET_BY_DIFFICULTY,
    DIFFICULTY_SCORE,
    FORM_SCORE,
    MIN_SETS_FOR_TREND,
    MIN_SESSIONS_FOR_DELOAD,
    DELOAD_SIGNAL_COUNT,
    clamp,
    round_to_increment,
)
from src.models import Difficulty, FormQuality, SetPerformance, Suggestion


FORM_CORRECTION_TIPS = [
    "Record yourself to check form",
    "Consider reducing range of motion if needed",
]


def _decide(difficulty: Difficulty, form: FormQuality, heavy: float, light: float,
            current_reps: int, target_reps: int) -> dict:
    """
    Weight/rep decision for one (difficulty, form) pair.

    Every Difficulty has a branch and every branch covers all three forms,
    so the table is exhaustive over the 15 combinations.
    """
    d = {"weight": 0.0, "reps": 0, "rest": 0, "reasoning": "", "tips": [], "warnings": []}

    if difficulty is Difficulty.TOO_EASY:
        if form is FormQuality.PERFECT:
            d["weight"] = heavy
            d["reasoning"] = "Great job! The weight was too light. Increasing significantly."
        else:
            d["reps"] = 2
            d["reasoning"] = "Add reps first to perfect your form before adding weight."
            d["tips"].append("Focus on controlled tempo and full range of motion")

    elif difficulty is Difficulty.EASY:
        if form is FormQuality.PERFECT:
            d["weight"] = light
            d["reasoning"] = "Solid set! Time for a small weight increase."
        else:
            d["reps"] = 1
            d["reasoning"] = "Add one rep to build confidence with current weight."

    elif difficulty is Difficulty.PERFECT:
        if form is FormQuality.PERFECT:
            d["reasoning"] = "Perfect execution! Maintain this weight and reps."
        else:
            d["reasoning"] = "Good difficulty, but focus on form quality next set."
            d["tips"].extend([
                "Slow down the eccentric phase",
                "Maintain tension throughout the movement",
            ])

    elif difficulty is Difficulty.CHALLENGING:
        if form is FormQuality.POOR:
            d["weight"] = -light
            d["reps"] = -1
            d["reasoning"] = "Form breakdown detected. Reducing weight to protect you."
            d["warnings"].append("Form breakdown - form quality is compromised, injury risk")
            d["tips"].append("Reset your setup between reps")
        else:
            d["rest"] = 30
            d["reasoning"] = "That was tough! Keep the weight same, focus on recovery."

    elif difficulty is Difficulty.FAILURE:
        d["weight"] = -heavy
        d["reps"] = int(clamp(target_reps - current_reps, -2, 0))
        d["rest"] = 60
        d["reasoning"] = "Significant weight reduction needed. Let's rebuild safely."
        d["warnings"].append("You may be fatigued - consider if a deload is needed")

    else:
        raise ValueError(f"Unhandled difficulty: {difficulty!r}")

    return d


class SuggestionEngine:
    """Holds no fields; see get_suggestion_engine()."""

    __slots__ = ()

    def generate_suggestion(self, params) -> Suggestion:
        """
        Recommend weight, reps and rest for the next set of the same exercise.

        Args:
            params: SetPerformance, or a dict accepted by SetPerformance.from_dict

        Returns:
            Suggestion. Never raises for in-enum inputs; numbers are clamped.
        """
        if isinstance(params, dict):
            params = SetPerformance.from_dict(params)

        difficulty = Difficulty(params.difficulty)
        form = FormQuality(params.form_quality)
        current_weight = max(float(params.current_weight), 0.0)
        current_reps = max(int(params.current_reps), 1)
        target_reps = max(int(params.target_reps), 1)
        compound = bool(params.is_compound)

        d = _decide(
            difficulty, form,
            HEAVY_INCREMENT[compound], LIGHT_INCREMENT[compound],
            current_reps, target_reps,
        )
        weight_change = d["weight"]
        reasoning = d["reasoning"]
        form_tips = list(d["tips"])

        # Safety override: never add load on poor form unless the set already failed
        if form is FormQuality.POOR and difficulty is not Difficulty.FAILURE:
            if weight_change > 0:
                weight_change = 0.0
                reasoning += " Weight held due to form issues."
            form_tips.extend(FORM_CORRECTION_TIPS)

        next_weight = round_to_increment(max(current_weight + weight_change, 0.0))
        next_reps = min(max(current_reps + d["reps"], 1), target_reps + MAX_REPS_OVER_TARGET)
        rest = self.calculate_rest_time(difficulty, compound) + d["rest"]

        return Suggestion(
            next_weight=next_weight,
            next_reps=next_reps,
            rest_seconds=rest,
            reasoning=reasoning,
            form_tips=form_tips or None,
            warnings=d["warnings"] or None,
        )

    @staticmethod
    def calculate_rest_time(difficulty: Difficulty, is_compound: bool) -> int:
        """Base rest for the exercise type shifted by how hard the set felt."""
        base = BASE_REST_SECONDS[bool(is_compound)]
        return base + REST_OFFSET_BY_DIFFICULTY[Difficulty(difficulty).value]

    def analyze_progression_trend(self, sets: list[dict]) -> dict:
        """
        Classify a sequence of sets of one exercise.

        Each set needs 'difficulty' and 'form_quality' (or 'formQuality').
        Returns {trend: improving|maintaining|declining, recommendation}.
        """
        if len(sets) < MIN_SETS_FOR_TREND:
            return {
                "trend": "maintaining",
                "recommendation": "Continue building data for analysis (low confidence: fewer than 3 sets)",
            }

        difficulty_scores = [DIFFICULTY_SCORE[Difficulty(s["difficulty"]).value] for s in sets]
        form_scores = [FORM_SCORE[FormQuality(_form_of(s)).value] for s in sets]

        pairs = list(zip(difficulty_scores, difficulty_scores[1:]))
        non_decreasing = all(b >= a for a, b in pairs)
        non_increasing = all(b <= a for a, b in pairs)
        form_declining = form_scores[-1] < form_scores[0]

        if non_decreasing and not form_declining:
            return {
                "trend": "improving",
                "recommendation": "Excellent progression! Continue current strategy.",
            }
        if non_increasing or form_declining:
            return {
                "trend": "declining",
                "recommendation": "Fatigue accumulating. Consider ending workout or reducing volume.",
            }
        return {
            "trend": "maintaining",
            "recommendation": "Consistent performance. Ready for progression next session.",
        }

    def should_deload(self, recent_sessions: list[dict]) -> dict:
        """
        Deload readiness from recent session ratings.

        Each session needs 'overall_difficulty' (or 'difficulty') and
        'form_quality'. Fewer than 3 sessions never triggers a deload.
        """
        if len(recent_sessions) < MIN_SESSIONS_FOR_DELOAD:
            return {"should_deload": False}

        hard = {Difficulty.CHALLENGING, Difficulty.FAILURE}
        high_difficulty = sum(
            1 for s in recent_sessions
            if Difficulty(s.get("overall_difficulty", s.get("difficulty"))) in hard
        )
        poor_form = sum(
            1 for s in recent_sessions
            if FormQuality(_form_of(s)) is FormQuality.POOR
        )

        if high_difficulty >= DELOAD_SIGNAL_COUNT:
            return {
                "should_deload": True,
                "reason": "Multiple consecutive difficult sessions indicate accumulated fatigue",
            }
        if poor_form >= DELOAD_SIGNAL_COUNT:
            return {
                "should_deload": True,
                "reason": "Form quality declining - take a deload week to recover",
            }
        return {"should_deload": False}


def _form_of(record: dict) -> str:
    return record.get("form_quality", record.get("formQuality"))


_ENGINE: Optional[SuggestionEngine] = None


def get_suggestion_engine() -> SuggestionEngine:
    """Shared engine instance."""
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = SuggestionEngine()
    return _ENGINE


def generate_suggestion(params) -> Suggestion:
    return get_suggestion_engine().generate_suggestion(params)
