"""Test configuration — ensure src modules are importable, shared fixtures."""
import sys
from pathlib import Path

import pytest

# Add project root to path so `from src.xxx import` works
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def store():
    from src.program_store import InMemoryProgramStore
    return InMemoryProgramStore()


@pytest.fixture
def profile():
    from src.models import Profile
    return Profile.from_dict({
        "primary_goal": "muscle_gain",
        "training_experience": "intermediate",
        "available_equipment": ["dumbbells"],
        "available_days_per_week": 3,
        "session_duration_minutes": 45,
        "bodyweight_kg": 80,
    })
