"""
Periodization Engine — Configuration

Every fixed table the engine decides with lives here: load increments,
rest offsets, the 12-week phase calendar, equipment pools and the
exercise catalogue used for swaps. Modules never hardcode these numbers.
"""
import os

# ── Persistence (Supabase / PostgREST) ───────────────────────────────
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.environ.get("SUPABASE_SERVICE_KEY", "")
PROGRAM_VERSIONS_TABLE = os.environ.get("PROGRAM_VERSIONS_TABLE", "ai_program_versions")

# ═════════════════════════════════════════════════════════════════════
# SET SUGGESTIONS
# ═════════════════════════════════════════════════════════════════════

# Weight deltas in kg, keyed by is_compound
HEAVY_INCREMENT = {True: 5.0, False: 2.5}
LIGHT_INCREMENT = {True: 2.5, False: 1.25}

WEIGHT_ROUNDING = 0.25  # smallest loadable step (fractional plates)
MAX_REPS_OVER_TARGET = 3

BASE_REST_SECONDS = {True: 120, False: 90}

# Added to base rest regardless of the weight/rep decision
REST_OFFSET_BY_DIFFICULTY = {
    "too_easy":    -30,
    "easy":        -15,
    "perfect":       0,
    "challenging":  30,
    "failure":      60,
}

DIFFICULTY_SCORE = {
    "too_easy":    1,
    "easy":        2,
    "perfect":     3,
    "challenging": 4,
    "failure":     5,
}

FORM_SCORE = {
    "poor":    1,
    "good":    2,
    "perfect": 3,
}

MIN_SETS_FOR_TREND = 3
MIN_SESSIONS_FOR_DELOAD = 3
DELOAD_SIGNAL_COUNT = 2  # sessions flagged before a deload is recommended

# ═════════════════════════════════════════════════════════════════════
# PROGRAM GENERATION
# ═════════════════════════════════════════════════════════════════════

PROGRAM_WEEKS = 12
SLICE_ADVANCE = 2  # pool offset between consecutive workouts of a week
EXPERIENCED_EXTRA_SETS = 1
EXPERIENCED_LEVELS = {"intermediate", "advanced"}

# Phase calendar: week ranges are inclusive
PHASES = [
    {"name": "Foundation",  "weeks": (1, 4),   "sets_multiplier": 1.0},
    {"name": "Development", "weeks": (5, 8),   "sets_multiplier": 1.0},
    {"name": "Deload",      "weeks": (9, 9),   "sets_multiplier": 0.5},
    {"name": "Realization", "weeks": (10, 12), "sets_multiplier": 1.0},
]
DELOAD_RPE = 6
DELOAD_WEEK_NOTE = "Deload week: half the sets, leave plenty in the tank"
SCHEDULED_DELOAD_FOCUS = "Deload"  # phase name, stored as the week focus

# RPE target per phase, per goal
GOAL_RPE = {
    "muscle_gain":          {"Foundation": 7, "Development": 8, "Realization": 9},
    "strength":             {"Foundation": 7, "Development": 8.5, "Realization": 9.5},
    "fat_loss":             {"Foundation": 7, "Development": 8, "Realization": 8.5},
    "general_fitness":      {"Foundation": 6, "Development": 7, "Realization": 8},
    "athletic_performance": {"Foundation": 7, "Development": 8, "Realization": 8.5},
}

GOAL_LABELS = {
    "muscle_gain": "Hypertrophy",
    "strength": "Strength",
    "fat_loss": "Metabolic Conditioning",
    "general_fitness": "General Fitness",
    "athletic_performance": "Power",
}

# Session length (minutes, upper bound) → exercises per workout
EXERCISES_BY_SESSION_MINUTES = [
    (30, 3),
    (60, 4),
]
MAX_EXERCISES_PER_WORKOUT = 5

DEFAULT_DAY_SPLITS = {
    1: ["Monday"],
    2: ["Monday", "Thursday"],
    3: ["Monday", "Wednesday", "Friday"],
    4: ["Monday", "Tuesday", "Thursday", "Friday"],
    5: ["Monday", "Tuesday", "Wednesday", "Friday", "Saturday"],
    6: ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
    7: ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
}

# ── Equipment tiers ──────────────────────────────────────────────────
# Keyword → capability. An equipment id matches when it contains the keyword.
# Bands count as cable access.
EQUIPMENT_KEYWORDS = {
    "barbell": "barbell",
    "gym": "gym",
    "commercial": "gym",
    "dumbbell": "dumbbell",
    "kettlebell": "kettlebell",
    "band": "cable",
    "cable": "cable",
    "pull_up": "pull_up",
    "pullup": "pull_up",
    "bench": "bench",
}

# Name fragment → capabilities that make the movement possible (any one of them).
# Gym access covers every movement.
EXERCISE_REQUIREMENTS = [
    ("barbell", {"barbell"}),
    ("overhead press", {"barbell"}),
    ("dumbbell", {"dumbbell"}),
    ("goblet", {"dumbbell", "kettlebell"}),
    ("pull-up", {"pull_up"}),
    ("chin-up", {"pull_up"}),
    ("pulldown", {"cable"}),
    ("cable", {"cable"}),
    ("band", {"cable"}),
    ("leg curl", set()),
]

# Exercise pools per tier. Order matters: compounds first.
EXERCISE_POOLS = {
    "bodyweight": [
        {"exercise_name": "Bodyweight Squat", "sets": 3, "reps": "12-15", "rest_seconds": 60, "is_compound": True},
        {"exercise_name": "Push-up", "sets": 3, "reps": "8-12", "rest_seconds": 60, "is_compound": True},
        {"exercise_name": "Reverse Lunge", "sets": 3, "reps": "10-12", "rest_seconds": 60, "is_compound": True},
        {"exercise_name": "Glute Bridge", "sets": 3, "reps": "12-15", "rest_seconds": 45, "is_compound": False},
        {"exercise_name": "Pike Push-up", "sets": 3, "reps": "6-10", "rest_seconds": 60, "is_compound": True},
        {"exercise_name": "Superman Hold", "sets": 3, "reps": "20-30s", "rest_seconds": 45, "is_compound": False},
        {"exercise_name": "Plank", "sets": 3, "reps": "30-45s", "rest_seconds": 45, "is_compound": False},
    ],
    "full_gym": [
        {"exercise_name": "Barbell Back Squat", "sets": 3, "reps": "6-8", "rest_seconds": 180, "is_compound": True},
        {"exercise_name": "Barbell Bench Press", "sets": 3, "reps": "6-8", "rest_seconds": 150, "is_compound": True},
        {"exercise_name": "Barbell Deadlift", "sets": 3, "reps": "5", "rest_seconds": 180, "is_compound": True},
        {"exercise_name": "Barbell Row", "sets": 3, "reps": "8-10", "rest_seconds": 120, "is_compound": True},
        {"exercise_name": "Overhead Press", "sets": 3, "reps": "6-8", "rest_seconds": 120, "is_compound": True},
        {"exercise_name": "Lat Pulldown", "sets": 3, "reps": "10-12", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Leg Curl", "sets": 3, "reps": "10-12", "rest_seconds": 60, "is_compound": False},
        {"exercise_name": "Cable Tricep Pushdown", "sets": 3, "reps": "12-15", "rest_seconds": 60, "is_compound": False},
    ],
    "dumbbell": [
        {"exercise_name": "Goblet Squat", "sets": 3, "reps": "10-12", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Dumbbell Bench Press", "sets": 3, "reps": "8-12", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Dumbbell Romanian Deadlift", "sets": 3, "reps": "10-12", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Dumbbell Row", "sets": 3, "reps": "10-12", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Dumbbell Shoulder Press", "sets": 3, "reps": "8-12", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Dumbbell Curl", "sets": 3, "reps": "10-15", "rest_seconds": 60, "is_compound": False},
        {"exercise_name": "Lateral Raise", "sets": 3, "reps": "12-15", "rest_seconds": 60, "is_compound": False},
    ],
    "mixed": [
        {"exercise_name": "Goblet Squat", "sets": 3, "reps": "10-12", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Push-up", "sets": 3, "reps": "10-15", "rest_seconds": 60, "is_compound": True},
        {"exercise_name": "Dumbbell Row", "sets": 3, "reps": "10-12", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Bulgarian Split Squat", "sets": 3, "reps": "8-10", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Pull-up", "sets": 3, "reps": "5-8", "rest_seconds": 120, "is_compound": True},
        {"exercise_name": "Dumbbell Shoulder Press", "sets": 3, "reps": "8-12", "rest_seconds": 90, "is_compound": True},
        {"exercise_name": "Band Face Pull", "sets": 3, "reps": "15-20", "rest_seconds": 45, "is_compound": False},
    ],
}

# Injured body part → name fragments that are unsafe for it
INJURY_EXCLUSIONS = {
    "shoulder": ["overhead", "press", "dip", "pike"],
    "knee": ["jump", "lunge", "leg extension", "split squat"],
    "lower_back": ["deadlift", "row"],
    "back": ["deadlift", "row"],
}

# Starting load as a fraction of bodyweight (name fragment → multiplier)
STARTING_WEIGHT_MULTIPLIERS = [
    ("deadlift", 0.6),
    ("squat", 0.5),
    ("bench", 0.4),
    ("row", 0.35),
    ("overhead press", 0.3),
    ("dumbbell", 0.15),
]
STARTING_WEIGHT_ROUNDING = 2.5

# ═════════════════════════════════════════════════════════════════════
# WEEKLY CHECK-IN
# ═════════════════════════════════════════════════════════════════════

LOW_ADHERENCE_PCT = 60
HIGH_ADHERENCE_PCT = 90
BURNOUT_STRESS_MIN = 4
BURNOUT_RECOVERY_MAX = 4
EASY_WEEK_DIFFICULTY_MAX = 6
GOOD_RECOVERY_MIN = 7

CHECKIN_RANGES = {
    "adherence": (0, 100),
    "difficulty": (1, 10),
    "recovery": (1, 10),
    "stress": (1, 5),
}
CHECKIN_WINDOW_DAYS = 7

DELOAD_SETS_FACTOR = 0.6
PROGRESS_NOTE = "Aim for top of rep range or +2.5kg"
DELOAD_NOTE = "Deload: Focus on perfect technique, easy RPE"

# ═════════════════════════════════════════════════════════════════════
# EXERCISE SWAPS
# ═════════════════════════════════════════════════════════════════════

SWAP_WEIGHT_FACTOR = 0.8  # conservative load for an unfamiliar movement

# Catalogue of swap targets, keyed by canonical name.
# Cue fields are copied onto the program entry on swap.
EXERCISE_CATALOGUE = {
    "Barbell Back Squat": {
        "aliases": ["Back Squat", "Squat", "BB Squat"],
        "equipment": "barbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/barbell-back-squat",
        "setup_cues": ["Bar on upper traps", "Feet shoulder-width, toes slightly out"],
        "execution_cues": ["Push hips back and bend knees", "Drive through midfoot to stand"],
        "common_mistakes": ["Knees caving inward", "Rounding lower back"],
    },
    "Goblet Squat": {
        "aliases": ["DB Goblet Squat", "Kettlebell Goblet Squat"],
        "equipment": "dumbbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/goblet-squat",
        "setup_cues": ["Hold the bell at chest height", "Elbows tucked under the weight"],
        "execution_cues": ["Sit between the heels", "Keep the torso upright"],
        "common_mistakes": ["Heels lifting", "Letting the chest drop"],
    },
    "Leg Press": {
        "aliases": ["Machine Leg Press"],
        "equipment": "machine",
        "is_compound": True,
        "video_url": "https://videos.example.com/leg-press",
        "setup_cues": ["Feet hip-width in the middle of the platform"],
        "execution_cues": ["Lower until knees reach ~90 degrees", "Press without locking out"],
        "common_mistakes": ["Hips rolling off the pad", "Locking the knees"],
    },
    "Barbell Bench Press": {
        "aliases": ["Bench Press", "Flat Bench Press", "Bench"],
        "equipment": "barbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/barbell-bench-press",
        "setup_cues": ["Eyes under the bar", "Shoulder blades retracted"],
        "execution_cues": ["Lower to mid-chest", "Elbows at 45 degrees"],
        "common_mistakes": ["Flaring elbows", "Bouncing the bar"],
    },
    "Dumbbell Bench Press": {
        "aliases": ["DB Bench Press", "Dumbbell Press"],
        "equipment": "dumbbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/dumbbell-bench-press",
        "setup_cues": ["Kick the dumbbells up from the knees", "Feet planted"],
        "execution_cues": ["Lower with control to chest level", "Press up and slightly in"],
        "common_mistakes": ["Dumbbells drifting too wide", "Short range of motion"],
    },
    "Push-up": {
        "aliases": ["Push Up", "Pushup", "Press-up"],
        "equipment": "bodyweight",
        "is_compound": True,
        "video_url": "https://videos.example.com/push-up",
        "setup_cues": ["Hands under shoulders", "Body in a straight line"],
        "execution_cues": ["Chest to just above the floor", "Elbows at 45 degrees"],
        "common_mistakes": ["Sagging hips", "Flared elbows"],
    },
    "Barbell Deadlift": {
        "aliases": ["Deadlift", "Conventional Deadlift"],
        "equipment": "barbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/barbell-deadlift",
        "setup_cues": ["Bar over midfoot", "Hinge and grip just outside the legs"],
        "execution_cues": ["Push the floor away", "Lock out with glutes"],
        "common_mistakes": ["Rounded back", "Bar drifting forward"],
    },
    "Dumbbell Romanian Deadlift": {
        "aliases": ["DB RDL", "Romanian Deadlift", "RDL"],
        "equipment": "dumbbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/dumbbell-romanian-deadlift",
        "setup_cues": ["Soft knees", "Dumbbells against the thighs"],
        "execution_cues": ["Hinge until hamstrings stretch", "Squeeze glutes to return"],
        "common_mistakes": ["Squatting the weight down", "Rounding the back"],
    },
    "Barbell Row": {
        "aliases": ["Bent Over Row", "BB Row"],
        "equipment": "barbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/barbell-row",
        "setup_cues": ["Hinge to ~45 degrees", "Neutral spine"],
        "execution_cues": ["Pull to lower ribs", "Lead with the elbows"],
        "common_mistakes": ["Using momentum", "Standing up during the pull"],
    },
    "Dumbbell Row": {
        "aliases": ["One Arm Dumbbell Row", "DB Row"],
        "equipment": "dumbbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/dumbbell-row",
        "setup_cues": ["Hand and knee on the bench", "Flat back"],
        "execution_cues": ["Pull the elbow towards the hip", "Lower under control"],
        "common_mistakes": ["Twisting the torso", "Shrugging"],
    },
    "Lat Pulldown": {
        "aliases": ["Cable Pulldown", "Wide Grip Pulldown"],
        "equipment": "cable",
        "is_compound": True,
        "video_url": "https://videos.example.com/lat-pulldown",
        "setup_cues": ["Thighs locked under the pad", "Grip slightly wider than shoulders"],
        "execution_cues": ["Pull the bar to upper chest", "Drive elbows down"],
        "common_mistakes": ["Leaning far back", "Pulling behind the neck"],
    },
    "Pull-up": {
        "aliases": ["Pull Up", "Pullup", "Chin-up"],
        "equipment": "bodyweight",
        "is_compound": True,
        "video_url": "https://videos.example.com/pull-up",
        "setup_cues": ["Dead hang, hands just outside shoulders"],
        "execution_cues": ["Pull chest to the bar", "Lower to full extension"],
        "common_mistakes": ["Kipping", "Half reps"],
    },
    "Overhead Press": {
        "aliases": ["OHP", "Military Press", "Standing Press"],
        "equipment": "barbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/overhead-press",
        "setup_cues": ["Bar on front delts", "Glutes and core braced"],
        "execution_cues": ["Press straight up past the face", "Head through at lockout"],
        "common_mistakes": ["Leaning back excessively", "Flaring ribs"],
    },
    "Dumbbell Shoulder Press": {
        "aliases": ["DB Shoulder Press", "Seated Dumbbell Press"],
        "equipment": "dumbbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/dumbbell-shoulder-press",
        "setup_cues": ["Dumbbells at shoulder height", "Palms forward"],
        "execution_cues": ["Press up and slightly in", "Lower to ear level"],
        "common_mistakes": ["Arching the lower back", "Partial range"],
    },
    "Landmine Press": {
        "aliases": ["Half Kneeling Landmine Press"],
        "equipment": "barbell",
        "is_compound": True,
        "video_url": "https://videos.example.com/landmine-press",
        "setup_cues": ["Bar end at shoulder height", "Staggered stance"],
        "execution_cues": ["Press up and forward", "Reach at the top"],
        "common_mistakes": ["Leaning back", "Shrugging"],
    },
    "Leg Curl": {
        "aliases": ["Lying Leg Curl", "Hamstring Curl"],
        "equipment": "machine",
        "is_compound": False,
        "video_url": "https://videos.example.com/leg-curl",
        "setup_cues": ["Knees just off the pad edge"],
        "execution_cues": ["Curl heels to glutes", "Slow eccentric"],
        "common_mistakes": ["Hips lifting off the pad"],
    },
    "Dumbbell Curl": {
        "aliases": ["Bicep Curl", "DB Curl"],
        "equipment": "dumbbell",
        "is_compound": False,
        "video_url": "https://videos.example.com/dumbbell-curl",
        "setup_cues": ["Elbows pinned to the sides"],
        "execution_cues": ["Curl without swinging", "Squeeze at the top"],
        "common_mistakes": ["Swinging the torso"],
    },
    "Lateral Raise": {
        "aliases": ["Dumbbell Lateral Raise", "Side Raise"],
        "equipment": "dumbbell",
        "is_compound": False,
        "video_url": "https://videos.example.com/lateral-raise",
        "setup_cues": ["Slight bend in the elbows"],
        "execution_cues": ["Raise to shoulder height", "Lead with the elbows"],
        "common_mistakes": ["Shrugging the weight up"],
    },
    "Plank": {
        "aliases": ["Front Plank", "Forearm Plank"],
        "equipment": "bodyweight",
        "is_compound": False,
        "video_url": "https://videos.example.com/plank",
        "setup_cues": ["Elbows under shoulders"],
        "execution_cues": ["Brace abs and squeeze glutes", "Breathe steadily"],
        "common_mistakes": ["Sagging hips", "Piking up"],
    },
}


# ═════════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS — derive lookups from the tables above
# ═════════════════════════════════════════════════════════════════════

def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def normalize_body_part(part: str) -> str:
    """'Lower Back' / 'lower-back' → 'lower_back', the INJURY_EXCLUSIONS key form."""
    return "_".join(part.strip().lower().replace("-", " ").split())


def round_to_increment(weight: float, step: float = WEIGHT_ROUNDING) -> float:
    """Round weight to the nearest loadable step."""
    return round(weight / step) * step


def get_phase(week_number: int) -> dict:
    """Phase entry for a program week (weeks past the calendar stay in the last phase)."""
    for phase in PHASES:
        first, last = phase["weeks"]
        if first <= week_number <= last:
            return phase
    return PHASES[-1]


def get_phase_rpe(goal: str, phase_name: str) -> float:
    """RPE target for a goal in a phase. Deload is fixed."""
    if phase_name == "Deload":
        return DELOAD_RPE
    table = GOAL_RPE.get(goal, GOAL_RPE["general_fitness"])
    return table.get(phase_name, 7)


def exercises_per_workout(session_minutes: int) -> int:
    """How many exercises fit in a session of the given length."""
    for limit, count in EXERCISES_BY_SESSION_MINUTES:
        if session_minutes <= limit:
            return count
    return MAX_EXERCISES_PER_WORKOUT


def get_catalogue_names() -> list:
    """Canonical names of every catalogue exercise."""
    return list(EXERCISE_CATALOGUE.keys())
