"""Sprint metric ratio and rollup tests."""
from decimal import Decimal

import pytest

from pi_planning.engine.sprint_metrics import SprintMetricEngine
from pi_planning.schemas.planning import MetricKey, MetricKind, PlanningSnapshot, SprintMetric, SprintMetricEntry, Team

PI = "26.1"


@pytest.fixture
def engine(settings):
    return SprintMetricEngine(settings)


@pytest.fixture
def neon_sheet(snapshot):
    return snapshot.sprint_metrics[0]


def _sheet(**values) -> SprintMetricEntry:
    return SprintMetricEntry(team_id="t", values={k.replace("_", "-"): v for k, v in values.items()})


class TestMetricKeys:
    def test_parse(self):
        assert MetricKey.parse("0-sp-plan") == MetricKey(0, SprintMetric.SP, MetricKind.PLAN)
        assert str(MetricKey(3, SprintMetric.BUGS_OPEN, MetricKind.ACTUAL)) == "3-bugsOpen-actual"

    def test_malformed_keys(self):
        assert MetricKey.parse("bogus") is None
        assert MetricKey.parse("x-sp-plan") is None
        assert MetricKey.parse("0-velocity-plan") is None

    def test_unknown_keys_dropped(self, neon_sheet):
        assert all(isinstance(k, MetricKey) for k in neon_sheet.values)
        assert neon_sheet.get(0, SprintMetric.DEFECT_RATIO, MetricKind.ACTUAL) == Decimal("0.2")


class TestCapacityRatios:
    def test_capacity_totals(self, engine, neon_sheet):
        assert engine.capacity_total(neon_sheet, 0, MetricKind.PLAN) == Decimal(80)
        assert engine.capacity_total(neon_sheet, 0, MetricKind.ACTUAL) == Decimal(72)

    def test_reported_ratio(self, engine, neon_sheet):
        assert engine.reported_ratio(neon_sheet, 0) == Decimal("90.00")

    def test_reported_ratio_blank_without_plan(self, engine, neon_sheet):
        assert engine.reported_ratio(neon_sheet, 2) is None
        assert engine.reported_ratio(None, 0) is None

    def test_reported_ratio_with_plan_but_no_actual(self, engine):
        assert engine.reported_ratio(_sheet(**{"0_dev_plan": 40}), 0) == 0


class TestAcceptance:
    def test_sp_acceptance(self, engine, neon_sheet):
        assert engine.sp_acceptance_ratio(neon_sheet, 0) == Decimal("75.00")

    def test_blank_when_actual_missing(self, engine):
        assert engine.sp_acceptance_ratio(_sheet(**{"0_sp_plan": 5}), 0) is None

    def test_blank_when_both_missing(self, engine):
        assert engine.sp_acceptance_ratio(_sheet(), 0) is None

    def test_blank_when_actual_zero(self, engine):
        assert engine.sp_acceptance_ratio(_sheet(**{"0_sp_plan": 5, "0_sp_actual": 0}), 0) is None

    def test_issue_acceptance(self, engine, neon_sheet):
        assert engine.issue_acceptance_ratio(neon_sheet, 0) is None
        sheet = _sheet(**{"0_issues_plan": 8, "0_issues_actual": 6})
        assert engine.issue_acceptance_ratio(sheet, 0) == Decimal("75.00")


class TestVelocity:
    def test_velocity_per_man_day(self, engine, neon_sheet):
        assert engine.velocity(neon_sheet, 0) == Decimal("0.38")

    def test_blank_without_dev_hours(self, engine):
        assert engine.velocity(_sheet(**{"0_sp_actual": 4}), 0) is None


class TestPiProgress:
    def test_cumulative(self, engine, neon_sheet):
        assert engine.pi_progress(neon_sheet, 0, Decimal(5)) == Decimal("60.00")
        assert engine.pi_progress(neon_sheet, 1, Decimal(5)) == Decimal("100.00")

    def test_monotonic(self, engine, neon_sheet):
        values = [engine.pi_progress(neon_sheet, i, Decimal(5)) for i in range(6)]
        assert values == sorted(values)

    def test_zero_planned_is_zero_percent(self, engine, neon_sheet):
        assert engine.pi_progress(neon_sheet, 3, Decimal(0)) == 0
        assert engine.pi_progress(None, 0, Decimal(0)) is not None

    def test_negative_index(self, engine, neon_sheet):
        with pytest.raises(ValueError):
            engine.pi_progress(neon_sheet, -1, Decimal(5))


class TestTeamReport:
    def test_report_covers_every_sprint(self, engine, snapshot, neon):
        report = engine.team_report(snapshot, PI, neon)
        assert report.planned_story_points == 5
        assert [row.sprint_index for row in report.sprints] == list(range(6))
        first = report.sprints[0]
        assert first.plan["sp"] == 4
        assert first.actual["issues"] is None
        assert first.capacity_plan == Decimal(80)
        assert first.velocity == Decimal("0.38")
        assert report.sprints[5].pi_progress == Decimal("100.00")

    def test_team_without_sheet(self, engine, snapshot, h1):
        report = engine.team_report(snapshot.model_copy(update={"sprint_metrics": []}), PI, h1)
        assert all(row.reported_ratio is None for row in report.sprints)
        assert all(row.pi_progress == 0 for row in report.sprints)


class TestRollup:
    def test_averages_skip_blank_teams(self, engine, snapshot):
        metrics = engine.rollup(snapshot, PI, 0).metrics
        assert metrics["reportedRatio"].value == Decimal("90.00")
        assert metrics["spAcceptanceRatio"].value == Decimal("75.00")
        assert metrics["issueAcceptanceRatio"].value is None
        assert metrics["piProgress"].value == Decimal("30.00")

    def test_breakdown_per_team(self, engine, snapshot):
        breakdown = engine.rollup(snapshot, PI, 0).metrics["spAcceptanceRatio"].breakdown
        assert [(b.team, b.value) for b in breakdown] == [("Neon", Decimal("75.00")), ("H1", None)]

    def test_average_rounds_once(self, engine):
        snapshot = PlanningSnapshot(
            teams=[Team(id="a", name="A"), Team(id="b", name="B")],
            sprint_metrics=[
                SprintMetricEntry(team_id="a", values={"0-sp-plan": 800, "0-sp-actual": 1}),
                SprintMetricEntry(team_id="b", values={"0-sp-plan": 2500, "0-sp-actual": 3}),
            ],
        )
        rollup = engine.rollup(snapshot, PI, 0).metrics["spAcceptanceRatio"]
        assert [b.value for b in rollup.breakdown] == [Decimal("0.13"), Decimal("0.12")]
        assert rollup.value == Decimal("0.12")

    def test_defect_ratio_uses_fixed_divisor(self, engine, snapshot, settings):
        assert settings.defect_ratio_team_divisor == 4
        assert engine.rollup(snapshot, PI, 0).metrics["defectRatio"].value == Decimal("0.20")

    def test_cycle_time_averages_defined_values(self, engine, snapshot):
        assert engine.rollup(snapshot, PI, 0).metrics["cycleTimeBugs"].value == Decimal("3.00")
        assert engine.rollup(snapshot, PI, 0).metrics["cycleTimeCollabs"].value is None

    def test_bug_counts_are_summed(self, engine, snapshot):
        metrics = engine.rollup(snapshot, PI, 0).metrics
        assert metrics["bugsCreated"].value == 5
        assert metrics["bugsCreated"].aggregation == "sum"
        assert metrics["bugsClosed"].value == 0

    def test_rollups_per_sprint(self, engine, snapshot):
        rollups = engine.rollups(snapshot, PI)
        assert len(rollups) == 6
        assert rollups[1].metrics["piProgress"].value == Decimal("50.00")
