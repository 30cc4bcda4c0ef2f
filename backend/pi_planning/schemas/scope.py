"""Scope-by-status schemas."""
from decimal import Decimal

from pi_planning.schemas.planning import PlanningModel


class StatusBucket(PlanningModel):
    status: str
    story_points: Decimal


class ScopeStory(PlanningModel):
    key: str
    name: str | None = None
    team: str
    sprint: str
    epic_key: str
    status: str
    story_points: Decimal


class ScopeReport(PlanningModel):
    feature: str | None = None
    team: str | None = None
    buckets: list[StatusBucket]
    total: Decimal
    stories: list[ScopeStory]
