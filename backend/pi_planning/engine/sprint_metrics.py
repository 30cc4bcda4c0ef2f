"""Plan/actual ratios per team and sprint, and their cross-team rollups."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

import structlog

from pi_planning.config import Settings, get_settings
from pi_planning.engine.cost import CostDeriver
from pi_planning.schemas.planning import (
    MetricKind,
    PlanningSnapshot,
    SprintMetric,
    SprintMetricEntry,
    Team,
)
from pi_planning.schemas.sprint_metrics import (
    MetricRollup,
    SprintMetricsRow,
    SprintRollup,
    TeamMetricValue,
    TeamSprintReport,
)

logger = structlog.get_logger(__name__)

HOUR_METRICS = (SprintMetric.DEV, SprintMetric.MAINTAIN, SprintMetric.MANAGE, SprintMetric.ABSENCE)


class SprintMetricEngine:
    """Ratios over explicitly entered plan/actual figures.

    Blank rules differ per metric: reported % is blank only without plan hours,
    acceptance ratios and velocity need both inputs non-zero, PI progress is 0%
    (never blank) when nothing was planned.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.costs = CostDeriver(self.settings)

    @staticmethod
    def _round(value: Decimal, places: int = 2) -> Decimal:
        quantize = Decimal(10) ** -places
        return value.quantize(quantize, rounding=ROUND_HALF_UP)

    def _finish(self, value: Decimal, exact: bool) -> Decimal:
        return value if exact else self._round(value)

    @staticmethod
    def _value(
        sheet: SprintMetricEntry | None,
        sprint_index: int,
        metric: SprintMetric,
        kind: MetricKind,
    ) -> Decimal | None:
        if sheet is None:
            return None
        return sheet.get(sprint_index, metric, kind)

    def capacity_total(self, sheet: SprintMetricEntry | None, sprint_index: int, kind: MetricKind) -> Decimal:
        """Dev + maintain + manage + absence hours; missing figures count as 0."""
        return sum(
            (self._value(sheet, sprint_index, m, kind) or Decimal(0) for m in HOUR_METRICS),
            Decimal(0),
        )

    def reported_ratio(
        self,
        sheet: SprintMetricEntry | None,
        sprint_index: int,
        exact: bool = False,
    ) -> Decimal | None:
        plan = self.capacity_total(sheet, sprint_index, MetricKind.PLAN)
        if not plan:
            return None
        actual = self.capacity_total(sheet, sprint_index, MetricKind.ACTUAL)
        return self._finish(actual / plan * Decimal(100), exact)

    def _acceptance_ratio(
        self,
        sheet: SprintMetricEntry | None,
        sprint_index: int,
        metric: SprintMetric,
        exact: bool = False,
    ) -> Decimal | None:
        plan = self._value(sheet, sprint_index, metric, MetricKind.PLAN)
        actual = self._value(sheet, sprint_index, metric, MetricKind.ACTUAL)
        if not plan or not actual:
            return None
        return self._finish(actual / plan * Decimal(100), exact)

    def sp_acceptance_ratio(
        self, sheet: SprintMetricEntry | None, sprint_index: int, exact: bool = False
    ) -> Decimal | None:
        return self._acceptance_ratio(sheet, sprint_index, SprintMetric.SP, exact)

    def issue_acceptance_ratio(
        self, sheet: SprintMetricEntry | None, sprint_index: int, exact: bool = False
    ) -> Decimal | None:
        return self._acceptance_ratio(sheet, sprint_index, SprintMetric.ISSUES, exact)

    def velocity(self, sheet: SprintMetricEntry | None, sprint_index: int) -> Decimal | None:
        """Velocity = actual SP / (actual dev hours / one man-day)."""
        story_points = self._value(sheet, sprint_index, SprintMetric.SP, MetricKind.ACTUAL)
        dev_hours = self._value(sheet, sprint_index, SprintMetric.DEV, MetricKind.ACTUAL)
        if not story_points or not dev_hours:
            return None
        man_days = dev_hours / Decimal(str(self.settings.man_day_hours))
        if man_days == 0:
            return None
        return self._round(story_points / man_days)

    def pi_progress(
        self,
        sheet: SprintMetricEntry | None,
        sprint_index: int,
        planned_story_points: Decimal,
        exact: bool = False,
    ) -> Decimal:
        """Cumulative actual SP of sprints 0..index over the team's planned SP for the PI."""
        if sprint_index < 0:
            raise ValueError(f"Sprint index must not be negative: {sprint_index}")
        if planned_story_points == 0:
            return Decimal(0)
        done = sum(
            (self._value(sheet, i, SprintMetric.SP, MetricKind.ACTUAL) or Decimal(0) for i in range(sprint_index + 1)),
            Decimal(0),
        )
        return self._finish(done / planned_story_points * Decimal(100), exact)

    def sheet_for(self, snapshot: PlanningSnapshot, team: Team) -> SprintMetricEntry | None:
        for entry in snapshot.sprint_metrics:
            if entry.team_id == team.id:
                return entry
        return None

    def planned_story_points(self, snapshot: PlanningSnapshot, team: Team) -> Decimal:
        return self.costs.planned_story_points(snapshot.stories, team)

    def team_report(self, snapshot: PlanningSnapshot, pi: str, team: Team) -> TeamSprintReport:
        scoped = snapshot.for_pi(pi)
        sheet = self.sheet_for(scoped, team)
        planned = self.planned_story_points(scoped, team)
        rows = []
        for index in range(self.settings.sprints_per_pi):
            rows.append(
                SprintMetricsRow(
                    sprint_index=index,
                    plan={m.value: self._value(sheet, index, m, MetricKind.PLAN) for m in SprintMetric},
                    actual={m.value: self._value(sheet, index, m, MetricKind.ACTUAL) for m in SprintMetric},
                    capacity_plan=self.capacity_total(sheet, index, MetricKind.PLAN),
                    capacity_actual=self.capacity_total(sheet, index, MetricKind.ACTUAL),
                    reported_ratio=self.reported_ratio(sheet, index),
                    sp_acceptance_ratio=self.sp_acceptance_ratio(sheet, index),
                    issue_acceptance_ratio=self.issue_acceptance_ratio(sheet, index),
                    velocity=self.velocity(sheet, index),
                    pi_progress=self.pi_progress(sheet, index, planned),
                )
            )
        return TeamSprintReport(
            team_id=team.id,
            team_name=team.name,
            pi=pi,
            planned_story_points=planned,
            sprints=rows,
        )

    def _average(self, name: str, breakdown: list[TeamMetricValue]) -> MetricRollup:
        """Mean over the teams that have a value, rounded once; the breakdown is rounded for display."""
        defined = [item.value for item in breakdown if item.value is not None]
        value = self._round(sum(defined, Decimal(0)) / len(defined)) if defined else None
        shown = [
            TeamMetricValue(team=item.team, value=None if item.value is None else self._round(item.value))
            for item in breakdown
        ]
        return MetricRollup(metric=name, aggregation="avg", value=value, breakdown=shown)

    def _sum(self, name: str, breakdown: list[TeamMetricValue]) -> MetricRollup:
        value = sum((item.value or Decimal(0) for item in breakdown), Decimal(0))
        return MetricRollup(metric=name, aggregation="sum", value=value, breakdown=breakdown)

    def _defect_ratio(self, breakdown: list[TeamMetricValue]) -> MetricRollup:
        # Divides by the historical team count, not by the teams reporting a value.
        divisor = self.settings.defect_ratio_team_divisor
        total = sum((item.value or Decimal(0) for item in breakdown), Decimal(0))
        value = self._round(total / Decimal(divisor)) if divisor else None
        return MetricRollup(metric="defectRatio", aggregation="avg", value=value, breakdown=breakdown)

    def rollup(self, snapshot: PlanningSnapshot, pi: str, sprint_index: int) -> SprintRollup:
        scoped = snapshot.for_pi(pi)
        sheets = [(team, self.sheet_for(scoped, team)) for team in scoped.teams]

        def per_team(calc: Callable[[Team, SprintMetricEntry | None], Decimal | None]) -> list[TeamMetricValue]:
            return [TeamMetricValue(team=team.name, value=calc(team, sheet)) for team, sheet in sheets]

        def ratio(calc: Callable[..., Decimal | None]) -> list[TeamMetricValue]:
            return per_team(lambda _, sheet: calc(sheet, sprint_index, exact=True))

        def actual_of(metric: SprintMetric) -> list[TeamMetricValue]:
            return per_team(lambda _, sheet: self._value(sheet, sprint_index, metric, MetricKind.ACTUAL))

        def progress(team: Team, sheet: SprintMetricEntry | None) -> Decimal | None:
            # Teams without planned SP are left out of the cross-team average.
            planned = self.planned_story_points(scoped, team)
            return self.pi_progress(sheet, sprint_index, planned, exact=True) if planned else None

        metrics = [
            self._average("reportedRatio", ratio(self.reported_ratio)),
            self._average("spAcceptanceRatio", ratio(self.sp_acceptance_ratio)),
            self._average("piProgress", per_team(progress)),
            self._average("issueAcceptanceRatio", ratio(self.issue_acceptance_ratio)),
            self._defect_ratio(actual_of(SprintMetric.DEFECT_RATIO)),
            self._average("cycleTimeBugs", actual_of(SprintMetric.CYCLE_TIME_BUGS)),
            self._average("cycleTimeCollabs", actual_of(SprintMetric.CYCLE_TIME_COLLABS)),
            self._sum("bugsCreated", actual_of(SprintMetric.BUGS_CREATED)),
            self._sum("bugsClosed", actual_of(SprintMetric.BUGS_CLOSED)),
            self._sum("bugsOpen", actual_of(SprintMetric.BUGS_OPEN)),
        ]
        logger.debug("sprint_rollup", pi=pi, sprint_index=sprint_index, teams=len(sheets))
        return SprintRollup(sprint_index=sprint_index, metrics={m.metric: m for m in metrics})

    def rollups(self, snapshot: PlanningSnapshot, pi: str) -> list[SprintRollup]:
        return [self.rollup(snapshot, pi, index) for index in range(self.settings.sprints_per_pi)]
