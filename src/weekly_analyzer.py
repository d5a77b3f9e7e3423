"""
Periodization Engine — Weekly Analyzer

Turns a week's aggregated check-in into a PROGRESS / MAINTAIN / DELOAD
decision and realizes it on a copy of the active plan. The input tree is
never touched: every cycle yields a new program_data for a new version.
"""
import copy
import math
from dataclasses import dataclass

from src.config import (
    LOW_ADHERENCE_PCT,
    HIGH_ADHERENCE_PCT,
    BURNOUT_STRESS_MIN,
    BURNOUT_RECOVERY_MAX,
    EASY_WEEK_DIFFICULTY_MAX,
    GOOD_RECOVERY_MIN,
    DELOAD_SETS_FACTOR,
    PROGRESS_NOTE,
    DELOAD_NOTE,
    SCHEDULED_DELOAD_FOCUS,
)
from src.models import (
    Action,
    AnalysisResult,
    ProgramVersion,
    WeeklyCheckIn,
    validate_program_data,
)
from src import program_generator


def analyze_weekly_progress(stats) -> AnalysisResult:
    """
    Ordered decision chain, first match wins.

    1. Low adherence      → MAINTAIN (repeat the week)
    2. High stress + poor recovery → DELOAD
    3. High adherence, easy week, good recovery → PROGRESS
    4. Otherwise          → PROGRESS

    REBUILD is never produced here; see rebuild_program.
    """
    if isinstance(stats, dict):
        stats = WeeklyCheckIn.from_dict(stats)

    if stats.adherence < LOW_ADHERENCE_PCT:
        return AnalysisResult(
            action=Action.MAINTAIN,
            feedback="It looks like a busy week! Let's repeat this week's schedule "
                     "to build consistency before adding more load.",
            reason="low_adherence",
        )

    if stats.stress >= BURNOUT_STRESS_MIN and stats.recovery <= BURNOUT_RECOVERY_MAX:
        return AnalysisResult(
            action=Action.DELOAD,
            feedback="Your stress is high and recovery is low. I've scheduled a deload "
                     "week to help your nervous system recover.",
            reason="burnout_guard",
        )

    if (stats.adherence >= HIGH_ADHERENCE_PCT
            and stats.difficulty <= EASY_WEEK_DIFFICULTY_MAX
            and stats.recovery >= GOOD_RECOVERY_MIN):
        return AnalysisResult(
            action=Action.PROGRESS,
            feedback="You're crushing it! I've increased the intensity for next week "
                     "to keep the gains coming.",
            reason="high_performance",
        )

    return AnalysisResult(
        action=Action.PROGRESS,
        feedback="Solid week. Let's keep the momentum going with some small progressive overload.",
        reason="steady_consistency",
    )


def _deload_sets(sets) -> int:
    return max(1, math.ceil(int(sets) * DELOAD_SETS_FACTOR))


def _with_progress_note(notes) -> str:
    if not notes:
        return PROGRESS_NOTE
    if PROGRESS_NOTE in notes:
        return notes
    return f"{notes}. {PROGRESS_NOTE}"


def generate_next_week_program(program_data: dict, action) -> dict:
    """
    New program_data realizing `action` on every exercise of every week.

    PROGRESS appends a load/rep target note (once); numbers are left for the
    athlete, and the scheduled Deload week is left as is.
    DELOAD cuts sets to 60% (rounded up, at least 1) and rewrites notes.
    MAINTAIN and REBUILD leave exercises unchanged.

    Raises:
        ProgramDataError: program_data has no weeks/workouts/exercises tree.
    """
    validate_program_data(program_data)
    action = Action(action)

    new_program = copy.deepcopy(program_data)
    new_program["version_number"] = (program_data.get("version_number") or 1) + 1

    for week in new_program["weeks"]:
        scheduled_deload = week.get("focus") == SCHEDULED_DELOAD_FOCUS
        for workout in week["workouts"]:
            for ex in workout["exercises"]:
                if action is Action.PROGRESS and not scheduled_deload:
                    ex["notes"] = _with_progress_note(ex.get("notes"))
                elif action is Action.DELOAD:
                    ex["sets"] = _deload_sets(ex.get("sets", 1))
                    ex["notes"] = DELOAD_NOTE

    return new_program


def rebuild_program(program_data: dict, profile) -> dict:
    """
    REBUILD path: regenerate the plan from the profile, keeping the
    version counter moving forward.
    """
    validate_program_data(program_data)
    new_program = program_generator.generate(profile)
    new_program["version_number"] = (program_data.get("version_number") or 1) + 1
    return new_program


@dataclass(frozen=True)
class VersionChange:
    """Everything the store needs to swap the active version in one step."""
    old_version_id: str
    old_version_number: int
    version_number: int
    program_data: dict
    change_type: str
    reason_for_change: str
    analysis: AnalysisResult


def plan_next_version(active: ProgramVersion, stats, profile=None) -> VersionChange:
    """
    Analyze a check-in against the active version and prepare its successor.

    A REBUILD decision (only reachable when a caller forces it) needs the
    profile to regenerate from.
    """
    analysis = analyze_weekly_progress(stats)
    return prepare_change(active, analysis, profile)


def prepare_change(active: ProgramVersion, analysis: AnalysisResult, profile=None) -> VersionChange:
    if analysis.action is Action.REBUILD:
        if profile is None:
            raise ValueError("REBUILD requires the user's profile")
        new_data = rebuild_program(active.program_data, profile)
    else:
        new_data = generate_next_week_program(active.program_data, analysis.action)
    # The stored row's counter wins over whatever the tree carried
    new_data["version_number"] = active.version_number + 1

    return VersionChange(
        old_version_id=active.id,
        old_version_number=active.version_number,
        version_number=active.version_number + 1,
        program_data=new_data,
        change_type=analysis.action.change_type,
        reason_for_change=analysis.reason,
        analysis=analysis,
    )
