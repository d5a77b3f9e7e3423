"""
Periodization Engine — Orchestrator

Wires the engine to a program store for the three triggering events:
onboarding completion, weekly check-in submission and chat swap requests.
Run manually: python -m src.coach generate profile.json
              python -m src.coach analyze checkin.json
"""
import json
import sys

from src.models import Action, AnalysisResult, NoActiveProgramError, Profile, ProgramVersion
from src.program_generator import generate
from src.weekly_analyzer import analyze_weekly_progress, prepare_change
from src.program_modifier import parse_swap_intent, swap_exercise_in_program


def start_program(store, user_id: str, profile) -> ProgramVersion:
    """Generate version 1 at onboarding completion and store it as the active version."""
    if isinstance(profile, dict):
        profile = Profile.from_dict(profile)
    print(f"🏗️  Generating program for {user_id} ({profile.goal.value}, {profile.days_per_week} days/week)")
    program_data = generate(profile)
    version = store.create_initial(user_id, program_data)
    print(f"   ✅ v{version.version_number} stored: {program_data['program_name']}")
    return version


def submit_weekly_checkin(store, user_id: str, stats, profile=None) -> dict:
    """
    Weekly cycle: analyze the check-in and rotate the active version.

    Returns {analysis, version}. version is None when the user has no active
    program yet; the analysis is still returned so the UI can show feedback.
    """
    analysis = analyze_weekly_progress(stats)
    print(f"📊 Check-in for {user_id}: {analysis.action.value} ({analysis.reason})")

    active = store.get_active(user_id)
    if active is None:
        print("   ℹ️ No active program — nothing to update")
        return {"analysis": analysis, "version": None}

    change = prepare_change(active, analysis, profile)
    version = store.rotate(active, change.program_data, change.change_type, change.reason_for_change)
    print(f"   ✅ v{change.old_version_number} → v{version.version_number} ({change.change_type})")
    return {"analysis": analysis, "version": version}


def rebuild(store, user_id: str, profile, reason: str = "manual_rebuild") -> ProgramVersion:
    """REBUILD path: regenerate from the profile as a new version."""
    active = store.get_active(user_id)
    if active is None:
        raise NoActiveProgramError(f"user {user_id} has no active program to rebuild")
    analysis = AnalysisResult(
        action=Action.REBUILD,
        feedback="Your program has been rebuilt from your current profile.",
        reason=reason,
    )
    change = prepare_change(active, analysis, profile)
    version = store.rotate(active, change.program_data, change.change_type, change.reason_for_change)
    print(f"🔁 Rebuilt program for {user_id}: v{version.version_number}")
    return version


def handle_swap_request(store, user_id: str, payload) -> dict:
    """
    Apply a chat-detected swap to the active version in place.
    Returns {success, message, swap_count}; misses are reported, not raised.
    """
    intent = parse_swap_intent(payload)
    if intent is None:
        return {"success": False, "message": "No swap request found.", "swap_count": 0}
    target, replacement = intent

    active = store.get_active(user_id)
    if active is None:
        return {"success": False, "message": "No active program found.", "swap_count": 0}

    result = swap_exercise_in_program(active.program_data, target, replacement)
    if result.success:
        store.patch_program_data(active, result.program_data)
        print(f"🔄 {user_id}: {target} → {replacement} ({result.swap_count} occurrences)")
    else:
        print(f"   ❌ Swap failed for {user_id}: {result.message}")
    return {"success": result.success, "message": result.message, "swap_count": result.swap_count}


def _load_json(path: str) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


if __name__ == "__main__":
    if len(sys.argv) != 3 or sys.argv[1] not in ("generate", "analyze"):
        print("Usage: python -m src.coach generate profile.json | analyze checkin.json")
        sys.exit(2)

    command, path = sys.argv[1], sys.argv[2]
    if command == "generate":
        print(json.dumps(generate(_load_json(path)), indent=2))
    else:
        result = analyze_weekly_progress(_load_json(path))
        print(json.dumps({
            "action": result.action.value,
            "feedback": result.feedback,
            "reason": result.reason,
        }, indent=2))
