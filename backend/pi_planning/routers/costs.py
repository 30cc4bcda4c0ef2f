"""Cost derivation API routes."""
from fastapi import APIRouter

from pi_planning.engine.cost import CostDeriver
from pi_planning.schemas.cost import StoryCost, TeamCostSummary
from pi_planning.schemas.planning import PlanningSnapshot

router = APIRouter(prefix="/pis", tags=["costs"])


@router.post("/{pi}/costs/teams", response_model=list[TeamCostSummary])
async def get_team_costs(pi: str, snapshot: PlanningSnapshot):
    return CostDeriver().team_summaries(snapshot, pi)


@router.post("/{pi}/costs/stories", response_model=list[StoryCost])
async def get_story_costs(pi: str, snapshot: PlanningSnapshot):
    return CostDeriver().story_costs(snapshot, pi)
