"""Budget rollup schemas."""
from decimal import Decimal

from pi_planning.schemas.planning import PlanningModel


class BudgetRow(PlanningModel):
    """Budget vs. plan vs. actual for one feature, topic or team. Variance = budget - planned."""

    key: str
    name: str | None = None
    budget: Decimal
    planned: Decimal
    actual: Decimal
    variance: Decimal
    progress: int | None = None


class BudgetTotals(PlanningModel):
    budget: Decimal
    planned: Decimal
    actual: Decimal
    variance: Decimal


class BudgetReport(PlanningModel):
    scope: str
    team: str | None = None
    rows: list[BudgetRow]
    totals: BudgetTotals
