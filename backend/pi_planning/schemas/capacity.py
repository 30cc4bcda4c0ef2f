"""Capacity result schemas."""
from decimal import Decimal
from enum import Enum

from pi_planning.schemas.planning import PlanningModel


class CapacityBucket(str, Enum):
    DEV = "dev"
    MAINTAIN = "maintain"
    MANAGE = "manage"
    SP = "sp"


class DeveloperRates(PlanningModel):
    """Per-day capacity derived from a developer profile."""

    developer_key: str
    team: str
    special_case: bool
    dev_hours_per_day: Decimal
    maintain_hours_per_day: Decimal
    manage_hours_per_day: Decimal
    sp_per_day: Decimal

    def for_bucket(self, bucket: CapacityBucket) -> Decimal:
        return {
            CapacityBucket.DEV: self.dev_hours_per_day,
            CapacityBucket.MAINTAIN: self.maintain_hours_per_day,
            CapacityBucket.MANAGE: self.manage_hours_per_day,
            CapacityBucket.SP: self.sp_per_day,
        }[bucket]


class CapacityRow(PlanningModel):
    """One sprint of a capacity table. A None cell: developer not in the team that sprint."""

    sprint: str
    is_ip: bool
    cells: dict[str, Decimal | None]
    total: Decimal


class CapacityTable(PlanningModel):
    bucket: CapacityBucket
    team: str
    developers: list[str]
    special_cases: list[str]
    rows: list[CapacityRow]
    developer_totals: dict[str, Decimal]
    developer_totals_without_ip: dict[str, Decimal]
    total_with_ip: Decimal
    total_without_ip: Decimal
