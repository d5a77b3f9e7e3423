"""
Periodization Engine — Records & Enums

Value records passed between the engine and its persistence collaborator.
program_data itself stays a plain JSON-like dict tree; its shape must not
change across versions because history is retained.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from src.config import CHECKIN_RANGES, clamp, normalize_body_part


class Difficulty(str, Enum):
    TOO_EASY = "too_easy"
    EASY = "easy"
    PERFECT = "perfect"
    CHALLENGING = "challenging"
    FAILURE = "failure"


class FormQuality(str, Enum):
    POOR = "poor"
    GOOD = "good"
    PERFECT = "perfect"


class Goal(str, Enum):
    MUSCLE_GAIN = "muscle_gain"
    STRENGTH = "strength"
    FAT_LOSS = "fat_loss"
    GENERAL_FITNESS = "general_fitness"
    ATHLETIC_PERFORMANCE = "athletic_performance"


class Experience(str, Enum):
    COMPLETE_BEGINNER = "complete_beginner"
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Action(str, Enum):
    """Weekly decision. change_type on a stored version is the lowercase value."""
    PROGRESS = "PROGRESS"
    MAINTAIN = "MAINTAIN"
    DELOAD = "DELOAD"
    REBUILD = "REBUILD"

    @property
    def change_type(self) -> str:
        return self.value.lower()


# ── Errors ───────────────────────────────────────────────────────────

class ProgramDataError(ValueError):
    """program_data is missing its weeks/workouts/exercises structure."""


class StaleVersionError(RuntimeError):
    """A rotation was requested from a version that is no longer active."""


class NoActiveProgramError(LookupError):
    """The user has no active program version."""


# ── Records ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SetPerformance:
    difficulty: Difficulty
    form_quality: FormQuality
    current_weight: float
    current_reps: int
    target_reps: int
    is_compound: bool
    category: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "SetPerformance":
        """Accepts snake_case or the camelCase keys the workout UI sends."""
        return cls(
            difficulty=Difficulty(d["difficulty"]),
            form_quality=FormQuality(d.get("form_quality", d.get("formQuality"))),
            current_weight=float(d.get("current_weight", d.get("currentWeight", 0)) or 0),
            current_reps=int(d.get("current_reps", d.get("currentReps", 1)) or 1),
            target_reps=int(d.get("target_reps", d.get("targetReps", 1)) or 1),
            is_compound=bool(d.get("is_compound", d.get("isCompound", False))),
            category=d.get("category", d.get("exerciseCategory")),
        )


@dataclass(frozen=True)
class Suggestion:
    next_weight: float
    next_reps: int
    rest_seconds: int
    reasoning: str
    form_tips: Optional[list] = None
    warnings: Optional[list] = None

    def to_record(self) -> dict:
        """Shape stored as ai_suggestion on a set log."""
        record = asdict(self)
        record["timestamp"] = datetime.now(timezone.utc).isoformat()
        return {k: v for k, v in record.items() if v is not None}


@dataclass(frozen=True)
class WeeklyCheckIn:
    adherence: float
    total_volume: float
    difficulty: float
    recovery: float
    stress: float

    def __post_init__(self):
        # Trusted UI input: clamp instead of rejecting
        for name, (low, high) in CHECKIN_RANGES.items():
            object.__setattr__(self, name, clamp(getattr(self, name), low, high))
        object.__setattr__(self, "total_volume", max(self.total_volume, 0))

    @classmethod
    def from_dict(cls, d: dict) -> "WeeklyCheckIn":
        return cls(
            adherence=float(d.get("adherence", 0)),
            total_volume=float(d.get("total_volume", d.get("totalVolume", 0)) or 0),
            difficulty=float(d.get("difficulty", 5)),
            recovery=float(d.get("recovery", 5)),
            stress=float(d.get("stress", 3)),
        )


@dataclass(frozen=True)
class Profile:
    goal: Goal = Goal.GENERAL_FITNESS
    experience: Experience = Experience.BEGINNER
    equipment: frozenset = frozenset()
    days_per_week: int = 3
    session_minutes: int = 60
    injuries: tuple = ()
    selected_days: tuple = ()
    bodyweight_kg: Optional[float] = None

    @classmethod
    def from_dict(cls, d: dict) -> "Profile":
        """Build from an onboarding record (user_fitness_profiles row)."""
        injuries = []
        for injury in d.get("injuries", d.get("current_injuries", [])) or []:
            part = injury.get("body_part", "") if isinstance(injury, dict) else injury
            if part and part.strip():
                injuries.append(normalize_body_part(part))
        return cls(
            goal=Goal(d.get("goal", d.get("primary_goal")) or Goal.GENERAL_FITNESS),
            experience=Experience(d.get("experience", d.get("training_experience")) or Experience.BEGINNER),
            equipment=frozenset(e.lower() for e in d.get("equipment", d.get("available_equipment", [])) or []),
            days_per_week=int(d.get("days_per_week", d.get("available_days_per_week", 3)) or 3),
            session_minutes=int(d.get("session_minutes", d.get("session_duration_minutes", 60)) or 60),
            injuries=tuple(injuries),
            selected_days=tuple(d.get("selected_days") or ()),
            bodyweight_kg=d.get("bodyweight_kg", d.get("weight_kg")),
        )


@dataclass(frozen=True)
class AnalysisResult:
    action: Action
    feedback: str
    reason: str


@dataclass
class ProgramVersion:
    """One row of the append-only program history."""
    id: str
    user_id: str
    version_number: int
    program_data: dict
    active: bool = True
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    reason_for_change: Optional[str] = None
    change_type: Optional[str] = None

    def to_record(self) -> dict:
        return asdict(self)

    @classmethod
    def from_record(cls, row: dict) -> "ProgramVersion":
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            version_number=int(row.get("version_number") or 1),
            program_data=row.get("program_data") or {},
            active=bool(row.get("active", False)),
            created_at=row.get("created_at") or datetime.now(timezone.utc).isoformat(),
            reason_for_change=row.get("reason_for_change"),
            change_type=row.get("change_type"),
        )


def validate_program_data(program_data) -> None:
    """Raise ProgramDataError unless the weeks → workouts → exercises tree is intact."""
    if not isinstance(program_data, dict):
        raise ProgramDataError(f"program_data must be a dict, got {type(program_data).__name__}")
    weeks = program_data.get("weeks")
    if not isinstance(weeks, list):
        raise ProgramDataError("program_data has no 'weeks' list")
    for week in weeks:
        workouts = week.get("workouts") if isinstance(week, dict) else None
        if not isinstance(workouts, list):
            raise ProgramDataError(f"week {week.get('week_number', '?') if isinstance(week, dict) else '?'} has no 'workouts' list")
        for workout in workouts:
            exercises = workout.get("exercises") if isinstance(workout, dict) else None
            if not isinstance(exercises, list):
                raise ProgramDataError(
                    f"workout {workout.get('workout_name', '?') if isinstance(workout, dict) else '?'} "
                    f"in week {week.get('week_number', '?')} has no 'exercises' list"
                )
