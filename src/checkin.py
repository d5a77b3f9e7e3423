"""
Periodization Engine — Check-in Aggregation

Collapses raw workout logs into the WeeklyCheckIn stats the analyzer
consumes. Logs are rows of the workout_logs table: {date, total_volume_kg, ...}.
"""
from datetime import date as _date

import pandas as pd

from src.config import CHECKIN_WINDOW_DAYS
from src.models import WeeklyCheckIn


def logs_to_dataframe(logs: list[dict]) -> pd.DataFrame:
    """
    Flat DataFrame, one row per logged session.
    Columns: date (Timestamp), total_volume_kg (float), plus whatever else the rows carry.
    """
    if not logs:
        return pd.DataFrame(columns=["date", "total_volume_kg"])
    df = pd.DataFrame(logs)
    df["date"] = pd.to_datetime(df["date"]).dt.normalize()
    if "total_volume_kg" not in df.columns:
        df["total_volume_kg"] = 0.0
    df["total_volume_kg"] = pd.to_numeric(df["total_volume_kg"], errors="coerce").fillna(0.0)
    return df.sort_values("date").reset_index(drop=True)


def trailing_window(df: pd.DataFrame, as_of=None, days: int = CHECKIN_WINDOW_DAYS) -> pd.DataFrame:
    """Sessions dated within the last `days` days up to and including as_of."""
    if df.empty:
        return df
    end = pd.Timestamp(as_of or _date.today()).normalize()
    start = end - pd.Timedelta(days=days)
    return df[(df["date"] >= start) & (df["date"] <= end)]


def weekly_volume(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per calendar week: sessions, total volume and week-over-week change.
    Empty in, empty out.
    """
    if df.empty:
        return pd.DataFrame()
    weekly = (
        df.assign(week_start=df["date"].dt.to_period("W-SUN").dt.start_time)
        .groupby("week_start")
        .agg(
            sessions=("date", "count"),
            total_volume=("total_volume_kg", "sum"),
        )
        .reset_index()
        .sort_values("week_start")
    )
    weekly["vol_change_pct"] = (weekly["total_volume"].pct_change() * 100).round(1)
    return weekly.reset_index(drop=True)


def build_checkin_stats(
    logs: list[dict],
    planned_workouts: int,
    difficulty: float,
    recovery: float,
    stress: float,
    as_of=None,
) -> WeeklyCheckIn:
    """
    WeeklyCheckIn from the trailing 7 days of logs plus the athlete's ratings.

    adherence = completed / planned × 100, rounded and capped at 100.
    """
    window = trailing_window(logs_to_dataframe(logs), as_of)
    completed = len(window)
    planned = max(int(planned_workouts or 0), 1)
    adherence = min(round(completed / planned * 100), 100)
    total_volume = float(window["total_volume_kg"].sum()) if completed else 0.0

    return WeeklyCheckIn(
        adherence=adherence,
        total_volume=total_volume,
        difficulty=difficulty,
        recovery=recovery,
        stress=stress,
    )
