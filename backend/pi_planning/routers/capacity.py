"""Capacity API routes."""
from decimal import Decimal

from fastapi import APIRouter

from pi_planning.engine.capacity import CapacityCalculator
from pi_planning.engine.roster import missing_default_developers
from pi_planning.schemas.capacity import CapacityBucket, CapacityTable, DeveloperRates
from pi_planning.schemas.planning import Developer, PlanningSnapshot

router = APIRouter(prefix="/pis", tags=["capacity"])


@router.post("/{pi}/capacity/developers", response_model=list[DeveloperRates])
async def get_developer_rates(pi: str, snapshot: PlanningSnapshot):
    calculator = CapacityCalculator()
    return [calculator.developer_rates(d) for d in snapshot.for_pi(pi).developers]


@router.post("/{pi}/capacity/table", response_model=CapacityTable)
async def get_capacity_table(
    pi: str,
    snapshot: PlanningSnapshot,
    bucket: CapacityBucket = CapacityBucket.DEV,
    team: str | None = None,
    sprint: str | None = None,
):
    scoped = snapshot.for_pi(pi)
    return CapacityCalculator().capacity_table(
        scoped.developers, scoped.availabilities, bucket, team, sprint, teams=scoped.teams
    )


@router.post("/{pi}/capacity/team-hours", response_model=dict[str, Decimal])
async def get_team_hours(pi: str, snapshot: PlanningSnapshot):
    """Development hours per team, IP sprint excluded."""
    scoped = snapshot.for_pi(pi)
    return CapacityCalculator().team_hours_without_ip(scoped.developers, scoped.availabilities, scoped.teams)


@router.post("/{pi}/capacity/roster-defaults", response_model=list[Developer])
async def get_roster_defaults(pi: str, snapshot: PlanningSnapshot):
    return missing_default_developers(pi, snapshot.for_pi(pi).developers)
