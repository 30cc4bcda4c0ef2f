"""Budget rollup API routes."""
from fastapi import APIRouter, HTTPException

from pi_planning.engine.budget import BudgetRollupEngine
from pi_planning.schemas.budget import BudgetReport
from pi_planning.schemas.planning import PlanningSnapshot

router = APIRouter(prefix="/pis", tags=["budget"])


def _check_topic(snapshot: PlanningSnapshot, pi: str, topic: str | None) -> None:
    if topic and topic not in {t.key for t in snapshot.for_pi(pi).topics}:
        raise HTTPException(status_code=404, detail="Topic not found")


@router.post("/{pi}/budget/topics", response_model=BudgetReport)
async def get_topic_budget(pi: str, snapshot: PlanningSnapshot, team: str | None = None, topic: str | None = None):
    _check_topic(snapshot, pi, topic)
    return BudgetRollupEngine().topic_report(snapshot, pi, team, topic)


@router.post("/{pi}/budget/features", response_model=BudgetReport)
async def get_feature_budget(pi: str, snapshot: PlanningSnapshot, team: str | None = None, topic: str | None = None):
    _check_topic(snapshot, pi, topic)
    return BudgetRollupEngine().feature_report(snapshot, pi, team, topic)


@router.post("/{pi}/budget/teams", response_model=BudgetReport)
async def get_team_budget(pi: str, snapshot: PlanningSnapshot):
    return BudgetRollupEngine().team_report(snapshot, pi)
