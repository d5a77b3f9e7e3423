"""
Periodization Engine — Program Generator

Builds the initial 12-week plan from an onboarding profile:
- Equipment tier → fixed exercise pool
- Equipment- and injury-aware pool filtering
- Pool slicing into daily workouts
- Fixed 4-phase calendar with a scheduled week-9 deload
"""
import math

from src.config import (
    PROGRAM_WEEKS,
    SLICE_ADVANCE,
    EXPERIENCED_EXTRA_SETS,
    EXPERIENCED_LEVELS,
    DELOAD_WEEK_NOTE,
    SCHEDULED_DELOAD_FOCUS,
    GOAL_LABELS,
    DEFAULT_DAY_SPLITS,
    EQUIPMENT_KEYWORDS,
    EXERCISE_REQUIREMENTS,
    EXERCISE_POOLS,
    INJURY_EXCLUSIONS,
    STARTING_WEIGHT_MULTIPLIERS,
    STARTING_WEIGHT_ROUNDING,
    clamp,
    normalize_body_part,
    get_phase,
    get_phase_rpe,
    exercises_per_workout,
)
from src.models import Profile


def equipment_capabilities(equipment) -> set:
    """Map free-form equipment ids (e.g. 'adjustable_dumbbells') to capabilities."""
    caps = set()
    for item in equipment:
        item = item.lower()
        for keyword, cap in EQUIPMENT_KEYWORDS.items():
            if keyword in item:
                caps.add(cap)
    return caps


def equipment_tier(equipment) -> str:
    """
    Pick the exercise pool for a set of equipment ids.

    barbell or gym access → full_gym; dumbbells alone → dumbbell;
    nothing usable → bodyweight; anything else → mixed.
    """
    caps = equipment_capabilities(equipment)
    if "gym" in caps or "barbell" in caps:
        return "full_gym"
    if caps == {"dumbbell"}:
        return "dumbbell"
    if not caps:
        return "bodyweight"
    return "mixed"


def is_available(exercise_name: str, capabilities) -> bool:
    """False when the movement needs equipment the user does not have."""
    if "gym" in capabilities:
        return True
    name = exercise_name.lower()
    for fragment, needs in EXERCISE_REQUIREMENTS:
        if fragment in name and not needs & set(capabilities):
            return False
    return True


def is_safe(exercise_name: str, injuries) -> bool:
    name = exercise_name.lower()
    for part in injuries:
        for fragment in INJURY_EXCLUSIONS.get(normalize_body_part(part), []):
            if fragment in name:
                return False
    return True


def build_pool(tier: str, injuries, needed: int, capabilities=None) -> list[dict]:
    """
    Tier pool minus unsafe or unavailable movements, topped up from the
    bodyweight pool when the filters leave too few exercises for one workout.

    capabilities=None skips the equipment filter.
    """
    def usable(ex):
        name = ex["exercise_name"]
        if capabilities is not None and not is_available(name, capabilities):
            return False
        return is_safe(name, injuries)

    pool = [ex for ex in EXERCISE_POOLS[tier] if usable(ex)]
    if len(pool) < needed and tier != "bodyweight":
        names = {ex["exercise_name"] for ex in pool}
        for ex in EXERCISE_POOLS["bodyweight"]:
            if len(pool) >= needed:
                break
            if ex["exercise_name"] not in names and usable(ex):
                pool.append(ex)
    return pool


def slice_pool(pool: list[dict], workout_index: int, count: int) -> list[dict]:
    """
    Exercises for the workout at workout_index.

    Start advances by SLICE_ADVANCE per workout and wraps around the pool;
    the slice never holds the same exercise twice.
    """
    if not pool:
        return []
    count = min(count, len(pool))
    start = (SLICE_ADVANCE * workout_index) % len(pool)
    return [pool[(start + i) % len(pool)] for i in range(count)]


def starting_weight(exercise_name: str, bodyweight_kg) -> float | None:
    """Bodyweight-relative starting load, or None for unloaded movements."""
    if not bodyweight_kg:
        return None
    name = exercise_name.lower()
    for fragment, multiplier in STARTING_WEIGHT_MULTIPLIERS:
        if fragment in name:
            weight = bodyweight_kg * multiplier
            rounded = round(weight / STARTING_WEIGHT_ROUNDING) * STARTING_WEIGHT_ROUNDING
            return max(rounded, STARTING_WEIGHT_ROUNDING)
    return None


def day_names(profile: Profile) -> list[str]:
    """
    Training days for one week. Chosen days come first; when fewer are chosen
    than days_per_week the rest are filled from the default split, in week order.
    """
    days = int(clamp(profile.days_per_week, 1, 7))
    if not profile.selected_days:
        return DEFAULT_DAY_SPLITS[days]

    week = DEFAULT_DAY_SPLITS[7]
    chosen = []
    for day in profile.selected_days:
        if day not in chosen:
            chosen.append(day)
    chosen = chosen[:days]
    for day in DEFAULT_DAY_SPLITS[days] + week:
        if len(chosen) >= days:
            break
        if day not in chosen:
            chosen.append(day)
    return sorted(chosen, key=lambda d: week.index(d) if d in week else len(week))


def build_exercise(template: dict, week_number: int, profile: Profile) -> dict:
    phase = get_phase(week_number)
    sets = template["sets"]
    if profile.experience.value in EXPERIENCED_LEVELS:
        sets += EXPERIENCED_EXTRA_SETS
    sets = max(1, math.ceil(sets * phase["sets_multiplier"]))

    rpe = get_phase_rpe(profile.goal.value, phase["name"])
    exercise = {
        "exercise_name": template["exercise_name"],
        "sets": sets,
        "reps": template["reps"],
        "rest_seconds": template["rest_seconds"],
        "rpe_target": rpe,
        "notes": f"RPE {rpe}",
    }
    if phase["name"] == SCHEDULED_DELOAD_FOCUS:
        exercise["notes"] = f"{exercise['notes']}. {DELOAD_WEEK_NOTE}"

    weight = starting_weight(template["exercise_name"], profile.bodyweight_kg)
    if weight is not None:
        exercise["suggested_weight_kg"] = weight
    return exercise


def build_week(week_number: int, pool: list[dict], profile: Profile, per_workout: int) -> dict:
    phase = get_phase(week_number)
    workouts = []
    for i, day in enumerate(day_names(profile)):
        templates = slice_pool(pool, i, per_workout)
        workouts.append({
            "day": day,
            "workout_name": f"{phase['name']} Day {i + 1}",
            "exercises": [build_exercise(t, week_number, profile) for t in templates],
        })
    return {
        "week_number": week_number,
        "focus": phase["name"],
        "workouts": workouts,
    }


def generate(profile) -> dict:
    """
    Synthesize the full periodized plan.

    Args:
        profile: Profile, or an onboarding dict accepted by Profile.from_dict

    Returns:
        program_data tree: weeks → workouts → exercises, plus program
        metadata and version_number 1.
    """
    if isinstance(profile, dict):
        profile = Profile.from_dict(profile)

    capabilities = equipment_capabilities(profile.equipment)
    tier = equipment_tier(profile.equipment)
    per_workout = exercises_per_workout(profile.session_minutes)
    pool = build_pool(tier, profile.injuries, per_workout, capabilities)

    weeks = [build_week(n, pool, profile, per_workout) for n in range(1, PROGRAM_WEEKS + 1)]

    goal_label = GOAL_LABELS.get(profile.goal.value, "General Fitness")
    experience = profile.experience.value.replace("_", " ").title()
    return {
        "program_name": f"{PROGRAM_WEEKS}-Week {experience} {goal_label} Program",
        "program_overview": (
            f"{len(day_names(profile))} sessions/week, "
            f"{tier.replace('_', ' ')} equipment, "
            f"{per_workout} exercises per session."
        ),
        "duration_weeks": PROGRAM_WEEKS,
        "equipment_tier": tier,
        "version_number": 1,
        "weeks": weeks,
        "progression_notes": "2-for-2 rule: add load once you beat the top of the rep range for 2 sets.",
        "deload_strategy": "Week 9 is a scheduled deload: half the sets at RPE 6.",
    }
