"""Pydantic schemas."""
from pi_planning.schemas.planning import (
    AvailabilityDay,
    Developer,
    Feature,
    MetricKey,
    MetricKind,
    PlanningSnapshot,
    SprintMetric,
    SprintMetricEntry,
    Story,
    Team,
    TimeEntry,
    Topic,
)
from pi_planning.schemas.calendar import DayInfo, SprintWindow
from pi_planning.schemas.capacity import CapacityBucket, CapacityRow, CapacityTable, DeveloperRates
from pi_planning.schemas.cost import StoryCost, TeamCostSummary
from pi_planning.schemas.budget import BudgetReport, BudgetRow, BudgetTotals
from pi_planning.schemas.scope import ScopeReport, ScopeStory, StatusBucket
from pi_planning.schemas.sprint_metrics import (
    MetricRollup,
    SprintMetricsRow,
    SprintRollup,
    TeamMetricValue,
    TeamSprintReport,
)

__all__ = [
    "AvailabilityDay",
    "Developer",
    "Feature",
    "MetricKey",
    "MetricKind",
    "PlanningSnapshot",
    "SprintMetric",
    "SprintMetricEntry",
    "Story",
    "Team",
    "TimeEntry",
    "Topic",
    "DayInfo",
    "SprintWindow",
    "CapacityBucket",
    "CapacityRow",
    "CapacityTable",
    "DeveloperRates",
    "StoryCost",
    "TeamCostSummary",
    "BudgetReport",
    "BudgetRow",
    "BudgetTotals",
    "ScopeReport",
    "ScopeStory",
    "StatusBucket",
    "MetricRollup",
    "SprintMetricsRow",
    "SprintRollup",
    "TeamMetricValue",
    "TeamSprintReport",
]
