"""
Periodization Engine — Program Modifier

Ad-hoc exercise substitution across the active plan, triggered when the
chat layer detects a swap intent. Runs outside the weekly cycle and does
not bump the version number.
"""
import copy
import json
from dataclasses import dataclass
from typing import Optional

from src.config import EXERCISE_CATALOGUE, SWAP_WEIGHT_FACTOR, round_to_increment
from src.models import validate_program_data

CUE_FIELDS = ("video_url", "setup_cues", "execution_cues", "common_mistakes")


def name_matches(exercise_name: str, target_name: str) -> bool:
    """
    Case-insensitive substring containment.

    "Squat" matches both "Barbell Back Squat" and
    "Goblet Squat". An empty target never matches.
    """
    target = target_name.strip().lower()
    return bool(target) and target in (exercise_name or "").lower()


def find_exercise(name: str) -> Optional[dict]:
    """
    Catalogue lookup: case-insensitive exact name first, then aliases.
    Returns a copy of the entry with its canonical 'name', or None.
    """
    wanted = name.strip().lower()
    if not wanted:
        return None
    for canonical, entry in EXERCISE_CATALOGUE.items():
        if canonical.lower() == wanted:
            return {"name": canonical, **copy.deepcopy(entry)}
    for canonical, entry in EXERCISE_CATALOGUE.items():
        if any(alias.lower() == wanted for alias in entry.get("aliases", [])):
            return {"name": canonical, **copy.deepcopy(entry)}
    return None


def swap_exercise(program_data: dict, target_name: str, replacement: dict) -> tuple[dict, int]:
    """
    Replace every exercise whose name contains target_name.

    The replaced entry keeps its position, sets, reps and rest; it takes the
    replacement's name and cue fields, and any suggested_weight_kg is scaled
    down by SWAP_WEIGHT_FACTOR.

    Returns:
        (program_data, swap_count). With no match the original object is
        returned untouched and swap_count is 0. The input is never mutated.
    """
    validate_program_data(program_data)

    matches = [
        (wi, ki, xi)
        for wi, week in enumerate(program_data["weeks"])
        for ki, workout in enumerate(week["workouts"])
        for xi, ex in enumerate(workout["exercises"])
        if name_matches(ex.get("exercise_name", ""), target_name)
    ]
    if not matches:
        return program_data, 0

    new_data = copy.deepcopy(program_data)
    for wi, ki, xi in matches:
        exercises = new_data["weeks"][wi]["workouts"][ki]["exercises"]
        old = exercises[xi]
        swapped = {**old, "exercise_name": replacement["name"]}
        for key in CUE_FIELDS:
            if key in replacement:
                swapped[key] = copy.deepcopy(replacement[key])
        if old.get("suggested_weight_kg"):
            swapped["suggested_weight_kg"] = round_to_increment(old["suggested_weight_kg"] * SWAP_WEIGHT_FACTOR)
        exercises[xi] = swapped

    return new_data, len(matches)


def parse_swap_intent(payload) -> Optional[tuple[str, str]]:
    """
    (target, replacement) from a chat action payload, or None.

    Accepts the decoded dict or its JSON text:
    {"action": "swap_exercise", "target": "...", "replacement": "..."}
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            return None
    if not isinstance(payload, dict) or payload.get("action") != "swap_exercise":
        return None
    target = str(payload.get("target") or "").strip()
    replacement = str(payload.get("replacement") or "").strip()
    if not target or not replacement:
        return None
    return target, replacement


@dataclass(frozen=True)
class SwapResult:
    success: bool
    message: str
    program_data: dict
    swap_count: int = 0


def swap_exercise_in_program(program_data: dict, target_name: str, replacement_name: str) -> SwapResult:
    """
    Catalogue-backed swap with user-facing messages.
    Lookup misses are reported, not raised.
    """
    replacement = find_exercise(replacement_name)
    if replacement is None:
        return SwapResult(
            success=False,
            message=f'I couldn\'t find "{replacement_name}" in the library.',
            program_data=program_data,
        )

    new_data, count = swap_exercise(program_data, target_name, replacement)
    if count == 0:
        return SwapResult(
            success=False,
            message=f'I couldn\'t find "{target_name}" in your program.',
            program_data=program_data,
        )

    return SwapResult(
        success=True,
        message=f"✅ Swapped {target_name} for {replacement['name']} ({count} occurrences).",
        program_data=new_data,
        swap_count=count,
    )
