"""Sprint calendar API routes."""
from typing import Annotated

from fastapi import APIRouter, Query

from pi_planning.engine.calendar import filter_days, generate_default_calendar, order_sprints, resolve_day, sprint_options
from pi_planning.schemas.calendar import DayInfo
from pi_planning.schemas.planning import AvailabilityDay, PlanningSnapshot

router = APIRouter(prefix="/pis", tags=["calendar"])


@router.get("/{pi}/calendar/sprint-options", response_model=list[str])
async def get_sprint_options(pi: str):
    return sprint_options(pi)


@router.post("/{pi}/calendar/default", response_model=list[AvailabilityDay])
async def seed_default_calendar(pi: str, snapshot: PlanningSnapshot):
    """Default weekday rows for a PI without a calendar; empty when rows already exist."""
    return generate_default_calendar(pi, snapshot.for_pi(pi).availabilities)


@router.post("/{pi}/calendar/sprints", response_model=list[str])
async def get_sprints(pi: str, snapshot: PlanningSnapshot):
    return order_sprints(snapshot.for_pi(pi).availabilities)


@router.post("/{pi}/calendar/days", response_model=list[DayInfo])
async def get_days(
    pi: str,
    snapshot: PlanningSnapshot,
    sprint: str | None = None,
    weekday: str | None = None,
    week: Annotated[int | None, Query(ge=1, le=53)] = None,
):
    rows = filter_days(snapshot.for_pi(pi).availabilities, sprint=sprint, weekday=weekday, week=week)
    return [resolve_day(row) for row in rows]
