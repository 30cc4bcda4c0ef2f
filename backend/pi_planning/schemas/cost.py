"""Cost derivation result schemas."""
from decimal import Decimal

from pi_planning.schemas.planning import PlanningModel


class TeamCostSummary(PlanningModel):
    """Plan-derived cost figures of one team in one PI."""

    team_id: str
    team_name: str
    story_count: int
    planned_story_points: Decimal
    story_point_value: Decimal
    planned_cost: Decimal
    available_hours: Decimal
    effective_rate: Decimal
    logged_hours: Decimal
    actual_cost: Decimal


class StoryCost(PlanningModel):
    key: str
    team: str
    team_id: str | None
    story_points: Decimal
    planned_cost: Decimal
    logged_hours: Decimal
    actual_cost: Decimal
