"""Root conftest for all tests.

Shared fixtures: loguru capture and small plan / activity payloads.
"""

from collections.abc import Iterator
from typing import Any

import pytest
from loguru import logger

from plan_engine.plans import Plan, decode_plan

EASY_RUN_DAY = (
    "Tuesday|1|false|false|RUN|Easy Run|40|"
    "WARMUP:Easy jog,5 min,Zone 1||MAIN:Steady run,30 min,Zone 2||COOLDOWN:Walk,5 min,Zone 1"
)
REST_DAY = "Monday|0|true|false|REST|Rest Day|0|"


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Collect formatted loguru records emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level} | {message}")
    yield messages
    logger.remove(handler_id)


def run_day(day_name: str, day_index: int, title: str = "Easy Run", minutes: int = 40) -> str:
    return (
        f"{day_name}|{day_index}|false|false|RUN|{title}|{minutes}|"
        "WARMUP:Easy jog,5 min,Zone 1||MAIN:Steady run,30 min,Zone 2||COOLDOWN:Walk,5 min,Zone 1"
    )


def plan_payload(start_date: str | None = "2025-01-06", weeks: list[list[Any]] | None = None) -> dict[str, Any]:
    """Build a generated plan payload; each inner list holds one week's day entries."""
    if weeks is None:
        weeks = [[REST_DAY, EASY_RUN_DAY]]
    meta: dict[str, Any] = {
        "plan_id": "plan-1",
        "plan_name": "Base Builder",
        "plan_type": "FITNESS",
        "athlete_level": "Intermediate",
        "total_duration_weeks": len(weeks),
    }
    if start_date is not None:
        meta["start_date"] = start_date
    return {
        "meta": meta,
        "periodization_overview": {"macrocycle_goal": "Run a strong 10k", "phases": ["Base", "Build"]},
        "schedule": [
            {"week_number": number, "phase_name": "Base", "weekly_focus": "Aerobic base", "days": days}
            for number, days in enumerate(weeks, start=1)
        ],
    }


@pytest.fixture
def simple_plan() -> Plan:
    """Two weeks from Monday 2025-01-06: a rest day then three runs each week."""
    week = [
        REST_DAY,
        run_day("Tuesday", 1),
        run_day("Wednesday", 2),
        run_day("Thursday", 3),
    ]
    return decode_plan(plan_payload(weeks=[week, week]))


@pytest.fixture
def strava_run() -> dict[str, Any]:
    """Provider-shaped 8 km, 40 minute easy run with splits under raw_data."""
    return {
        "id": 1001,
        "type": "Run",
        "name": "Morning Run",
        "distance": 8000.0,
        "moving_time": 2400,
        "average_speed": 3.33,
        "average_heartrate": 148.0,
        "has_heartrate": True,
        "start_date": "2025-01-07T06:30:00Z",
        "start_date_local": "2025-01-07T07:30:00",
        "raw_data": {
            "splits_metric": [{"distance": 1000.0, "moving_time": 300} for _ in range(8)],
        },
    }


@pytest.fixture
def make_payload():
    """Factory for generated plan payloads (see plan_payload)."""
    return plan_payload


@pytest.fixture
def make_run_day():
    """Factory for flattened RUN day strings (see run_day)."""
    return run_day
