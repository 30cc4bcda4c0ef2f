"""
Pytest configuration and fixtures.
"""
import datetime

import pytest

from pi_planning.config import Settings, get_settings
from pi_planning.schemas.planning import PlanningSnapshot

PI = "26.1"


def weekdays(start: str, end: str) -> list[str]:
    day = datetime.date.fromisoformat(start)
    last = datetime.date.fromisoformat(end)
    days = []
    while day <= last:
        if day.weekday() < 5:
            days.append(day.isoformat())
        day += datetime.timedelta(days=1)
    return days


@pytest.fixture
def settings() -> Settings:
    """Get test settings."""
    return get_settings()


@pytest.fixture
def snapshot_data() -> dict:
    """PI 26.1 with two teams, one sprint of ten weekdays and a two-day IP sprint.

    Neon: BRO at 8h/day, 100% dev -> 80 dev hours outside IP.
    H1: TSC booked under the long team name, 2 dev hours/day, absent one day -> 18 hours.
    """
    s1 = weekdays("2025-12-04", "2025-12-17")
    ip = ["2026-02-19", "2026-02-20"]
    availabilities = [{"date": d, "sprint": f"{PI}-S1", "pi": PI} for d in s1]
    availabilities[0]["TSC"] = 0
    availabilities += [{"date": d, "sprint": f"{PI}-IP", "pi": PI} for d in ip]
    return {
        "teams": [
            {"id": "neon", "name": "Neon", "storyPointValue": 1000, "budget": 6000},
            {"id": "h1", "name": "H1", "storyPointValue": 360, "budget": 2000},
        ],
        "developers": [
            {
                "key": "BRO",
                "team": "Neon",
                "dailyHours": 8,
                "load": 100,
                "developRatio": 100,
                "maintainRatio": 0,
                "manageRatio": 0,
                "velocity": 1,
                "pi": PI,
            },
            {
                "key": "TSC",
                "team": "Hydrogen 1",
                "dailyHours": "8",
                "load": "50",
                "developRatio": 50,
                "maintainRatio": 50,
                "manageRatio": "",
                "velocity": 2,
                "pi": PI,
            },
        ],
        "availabilities": availabilities,
        "stories": [
            {"key": "NEON-1", "sp": 5, "team": "Neon", "status": "Done", "sprint": f"{PI}-S1", "epic": "FEAT-1", "pi": PI},
            {"key": "H1-1", "sp": 3, "team": "Hydrogen 1", "status": "In Development", "sprint": f"{PI}-S1",
             "epic": "FEAT-2", "pi": PI},
            {"key": "H1-2", "sp": 2, "team": "h1", "status": "code review", "sprint": f"{PI}-S1", "epic": "FEAT-2",
             "pi": PI},
            {"key": "X-1", "sp": 8, "team": "Ghost", "status": "Open", "sprint": f"{PI}-S1", "epic": "FEAT-2", "pi": PI},
            {"key": "OLD-1", "sp": 13, "team": "Neon", "status": "Done", "epic": "FEAT-1", "pi": "25.4"},
        ],
        "timeEntries": [
            {"issueKey": "NEON-1", "sprintLabel": f"{PI}-S1", "hours": 8, "pi": PI},
            {"jiraKey": "H1-1", "sprint": f"{PI}-S1", "totalHours": "4", "pi": PI},
        ],
        "features": [
            {"jiraKey": "FEAT-1", "name": "Login", "budget": 6000, "perTeamBudget": {"neon": 6000}, "topicKey": "T1",
             "pi": PI},
            {"jiraKey": "FEAT-2", "name": "Reports", "budget": 3000, "perTeamBudget": {"H1": 2500}, "topicKey": "T1",
             "pi": PI},
            {"jiraKey": "FEAT-3", "name": "Unused", "budget": 0, "topicKey": "T2", "pi": PI},
        ],
        "topics": [
            {"key": "T2", "name": "Later", "priority": 2, "budget": 0, "pi": PI},
            {"key": "T1", "name": "Core", "priority": 1, "budget": 10000, "perTeamBudget": {"Neon": 7000}, "pi": PI},
        ],
        "sprintMetrics": [
            {
                "teamId": "neon",
                "pi": PI,
                "values": {
                    "0-dev-plan": 60,
                    "0-maintain-plan": 10,
                    "0-manage-plan": 5,
                    "0-absence-plan": 5,
                    "0-dev-actual": 64,
                    "0-maintain-actual": 8,
                    "0-absence-actual": 0,
                    "0-sp-plan": 4,
                    "0-sp-actual": 3,
                    "0-issues-plan": 4,
                    "1-sp-plan": 2,
                    "1-sp-actual": 2,
                    "0-defectRatio-actual": "0.2",
                    "0-bugsCreated-actual": 3,
                    "0-cycleTimeBugs-actual": 4,
                    "bogus": 1,
                },
            },
            {
                "teamId": "h1",
                "pi": PI,
                "values": {
                    "0-sp-plan": 5,
                    "0-defectRatio-actual": "0.6",
                    "0-bugsCreated-actual": 2,
                    "0-cycleTimeBugs-actual": 2,
                },
            },
        ],
    }


@pytest.fixture
def snapshot(snapshot_data) -> PlanningSnapshot:
    return PlanningSnapshot.model_validate(snapshot_data)


@pytest.fixture
def neon(snapshot):
    return snapshot.teams[0]


@pytest.fixture
def h1(snapshot):
    return snapshot.teams[1]
