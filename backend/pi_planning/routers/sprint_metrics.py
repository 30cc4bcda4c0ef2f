"""Sprint metric API routes."""
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query

from pi_planning.config import get_settings
from pi_planning.engine.sprint_metrics import SprintMetricEngine
from pi_planning.engine.teams import TeamAliases
from pi_planning.schemas.planning import PlanningSnapshot
from pi_planning.schemas.sprint_metrics import SprintRollup, TeamSprintReport

router = APIRouter(prefix="/pis", tags=["sprint-metrics"])


@router.post("/{pi}/sprint-metrics/teams/{team_id}", response_model=TeamSprintReport)
async def get_team_sheet(pi: str, team_id: str, snapshot: PlanningSnapshot):
    team = TeamAliases(get_settings().team_aliases).resolve(team_id, snapshot.teams)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return SprintMetricEngine().team_report(snapshot, pi, team)


@router.post("/{pi}/sprint-metrics/rollup", response_model=list[SprintRollup])
async def get_rollups(
    pi: str,
    snapshot: PlanningSnapshot,
    sprint_index: Annotated[int | None, Query(alias="sprintIndex", ge=0)] = None,
):
    engine = SprintMetricEngine()
    if sprint_index is not None:
        return [engine.rollup(snapshot, pi, sprint_index)]
    return engine.rollups(snapshot, pi)
