"""Scope-by-status API routes."""
from fastapi import APIRouter, HTTPException

from pi_planning.engine.scope import scope_by_status
from pi_planning.schemas.planning import PlanningSnapshot
from pi_planning.schemas.scope import ScopeReport

router = APIRouter(prefix="/pis", tags=["scope"])


def _check_feature(snapshot: PlanningSnapshot, pi: str, feature: str | None) -> None:
    if not feature or feature == "all":
        return
    scoped = snapshot.for_pi(pi)
    known = {f.jira_key for f in scoped.features} | {s.epic_key for s in scoped.stories if s.epic_key}
    if feature not in known:
        raise HTTPException(status_code=404, detail="Feature not found")


@router.post("/{pi}/scope", response_model=ScopeReport)
async def get_scope(pi: str, snapshot: PlanningSnapshot, feature: str | None = None, team: str | None = None):
    _check_feature(snapshot, pi, feature)
    return scope_by_status(snapshot, pi, feature=feature, team=team)
