"""Developer capacity and team capacity aggregation. Hours are Decimal, never rounded here."""
from collections import defaultdict
from decimal import Decimal
from typing import Iterable

import structlog

from pi_planning.config import Settings, get_settings
from pi_planning.engine.calendar import is_ip_sprint, order_sprints
from pi_planning.engine.teams import TeamAliases, is_all_teams
from pi_planning.schemas.capacity import CapacityBucket, CapacityRow, CapacityTable, DeveloperRates
from pi_planning.schemas.planning import AvailabilityDay, Developer, Team

logger = structlog.get_logger(__name__)


def _or_default(value: Decimal | None, default: float) -> Decimal:
    """Missing or zero profile values fall back to the configured default."""
    if value is None or value == 0:
        return Decimal(str(default))
    return value


def _group_by_sprint(rows: Iterable[AvailabilityDay]) -> dict[str, list[AvailabilityDay]]:
    grouped: dict[str, list[AvailabilityDay]] = defaultdict(list)
    for row in rows:
        grouped[row.sprint].append(row)
    return grouped


class CapacityCalculator:
    """Turns developer profiles and availability grids into capacity figures."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.aliases = TeamAliases(self.settings.team_aliases)

    def developer_rates(self, developer: Developer) -> DeveloperRates:
        """Per-day hours per bucket and SP per day.

        effective = dailyHours × load%; bucket = effective × ratio%;
        SP/day = dev hours / one man-day × velocity.
        """
        daily_hours = _or_default(developer.daily_hours, self.settings.default_daily_hours)
        load = _or_default(developer.load, self.settings.default_load_pct)
        effective = daily_hours * (load / Decimal(100))
        dev_hours = effective * ((developer.develop_ratio or Decimal(0)) / Decimal(100))
        maintain_hours = effective * ((developer.maintain_ratio or Decimal(0)) / Decimal(100))
        manage_hours = effective * ((developer.manage_ratio or Decimal(0)) / Decimal(100))
        sp_per_day = (dev_hours / Decimal(str(self.settings.man_day_hours))) * (developer.velocity or Decimal(0))
        return DeveloperRates(
            developer_key=developer.key,
            team=developer.team,
            special_case=developer.special_case,
            dev_hours_per_day=dev_hours,
            maintain_hours_per_day=maintain_hours,
            manage_hours_per_day=manage_hours,
            sp_per_day=sp_per_day,
        )

    def capacity_days(self, developer_key: str, rows: Iterable[AvailabilityDay], sprint: str) -> Decimal:
        """Available days in a sprint; a day without an entry counts as a full day."""
        return sum(
            (row.fraction(developer_key) for row in rows if row.sprint == sprint),
            Decimal(0),
        )

    def sprint_capacity(
        self,
        developer: Developer,
        rows: Iterable[AvailabilityDay],
        sprint: str,
        bucket: CapacityBucket,
    ) -> Decimal:
        rate = self.developer_rates(developer).for_bucket(CapacityBucket(bucket))
        return self.capacity_days(developer.key, rows, sprint) * rate

    def is_member(
        self,
        developer: Developer,
        sprint: str,
        team: str | None,
        teams: Iterable[Team] = (),
    ) -> bool:
        """Teamless developers belong to no team, not even under "all"."""
        sprint_team = developer.team_for_sprint(sprint)
        if is_all_teams(team):
            return bool(sprint_team.strip())
        return self.aliases.same_team(sprint_team, team, teams)

    def capacity_table(
        self,
        developers: list[Developer],
        rows: list[AvailabilityDay],
        bucket: CapacityBucket,
        team: str | None = None,
        sprint: str | None = None,
        teams: Iterable[Team] = (),
    ) -> CapacityTable:
        """Sprint × developer grid for one bucket with with-IP and without-IP totals.

        specialCase developers keep their own cells and totals but never count
        towards row or grand totals.
        """
        bucket = CapacityBucket(bucket)
        teams = list(teams)
        by_sprint = _group_by_sprint(rows)
        sprints = [s for s in order_sprints(rows) if not sprint or s == sprint]
        visible = [d for d in developers if any(self.is_member(d, s, team, teams) for s in sprints)]
        rates = {d.key: self.developer_rates(d).for_bucket(bucket) for d in visible}

        developer_totals = {d.key: Decimal(0) for d in visible}
        developer_totals_without_ip = {d.key: Decimal(0) for d in visible}
        table_rows: list[CapacityRow] = []
        for sprint_name in sprints:
            ip = is_ip_sprint(sprint_name, self.settings.ip_sprint_marker)
            cells: dict[str, Decimal | None] = {}
            row_total = Decimal(0)
            for developer in visible:
                if not self.is_member(developer, sprint_name, team, teams):
                    cells[developer.key] = None
                    continue
                value = self.capacity_days(developer.key, by_sprint[sprint_name], sprint_name) * rates[developer.key]
                cells[developer.key] = value
                developer_totals[developer.key] += value
                if not ip:
                    developer_totals_without_ip[developer.key] += value
                if not developer.special_case:
                    row_total += value
            table_rows.append(CapacityRow(sprint=sprint_name, is_ip=ip, cells=cells, total=row_total))

        counted = [d.key for d in visible if not d.special_case]
        return CapacityTable(
            bucket=bucket,
            team=team if not is_all_teams(team) else "all",
            developers=[d.key for d in visible],
            special_cases=[d.key for d in visible if d.special_case],
            rows=table_rows,
            developer_totals=developer_totals,
            developer_totals_without_ip=developer_totals_without_ip,
            total_with_ip=sum((developer_totals[k] for k in counted), Decimal(0)),
            total_without_ip=sum((developer_totals_without_ip[k] for k in counted), Decimal(0)),
        )

    def team_total(
        self,
        developers: list[Developer],
        rows: list[AvailabilityDay],
        team: str | None,
        bucket: CapacityBucket = CapacityBucket.DEV,
        include_ip: bool = False,
        teams: Iterable[Team] = (),
    ) -> Decimal:
        table = self.capacity_table(developers, rows, bucket, team, teams=teams)
        return table.total_with_ip if include_ip else table.total_without_ip

    def available_dev_hours(
        self,
        developers: list[Developer],
        rows: list[AvailabilityDay],
        team: str,
        teams: Iterable[Team] = (),
    ) -> Decimal:
        """Development hours of a team across the PI, IP sprint excluded."""
        return self.team_total(developers, rows, team, CapacityBucket.DEV, include_ip=False, teams=teams)

    def team_names(
        self,
        developers: list[Developer],
        rows: list[AvailabilityDay],
        teams: Iterable[Team] = (),
    ) -> list[str]:
        """Distinct canonical teams any developer belongs to in any sprint."""
        teams = list(teams)
        sprints = order_sprints(rows)
        names: list[str] = []
        for developer in developers:
            for name in [developer.team] + [developer.team_for_sprint(s) for s in sprints]:
                canonical = self.aliases.label(name, teams)
                if canonical and canonical not in names:
                    names.append(canonical)
        return names

    def team_hours_without_ip(
        self,
        developers: list[Developer],
        rows: list[AvailabilityDay],
        teams: Iterable[Team] = (),
    ) -> dict[str, Decimal]:
        """Development hours per canonical team name, IP sprints excluded."""
        teams = list(teams)
        by_sprint = _group_by_sprint(rows)
        hours: dict[str, Decimal] = defaultdict(Decimal)
        for developer in developers:
            if developer.special_case:
                continue
            dev_hours = self.developer_rates(developer).dev_hours_per_day
            for sprint_name, sprint_rows in by_sprint.items():
                if not sprint_name or is_ip_sprint(sprint_name, self.settings.ip_sprint_marker):
                    continue
                team = self.aliases.label(developer.team_for_sprint(sprint_name), teams)
                if not team:
                    continue
                hours[team] += self.capacity_days(developer.key, sprint_rows, sprint_name) * dev_hours
        return dict(hours)
