"""Sprint metric schemas. A None value is a blank cell, which is not the same as 0."""
from decimal import Decimal
from typing import Literal

from pi_planning.schemas.planning import PlanningModel


class SprintMetricsRow(PlanningModel):
    sprint_index: int
    plan: dict[str, Decimal | None]
    actual: dict[str, Decimal | None]
    capacity_plan: Decimal
    capacity_actual: Decimal
    reported_ratio: Decimal | None
    sp_acceptance_ratio: Decimal | None
    issue_acceptance_ratio: Decimal | None
    velocity: Decimal | None
    pi_progress: Decimal


class TeamSprintReport(PlanningModel):
    team_id: str
    team_name: str
    pi: str
    planned_story_points: Decimal
    sprints: list[SprintMetricsRow]


class TeamMetricValue(PlanningModel):
    team: str
    value: Decimal | None


class MetricRollup(PlanningModel):
    metric: str
    aggregation: Literal["avg", "sum"]
    value: Decimal | None
    breakdown: list[TeamMetricValue]


class SprintRollup(PlanningModel):
    sprint_index: int
    metrics: dict[str, MetricRollup]
