"""Budget rollups: features -> topics, and teams."""
from decimal import ROUND_HALF_UP, Decimal

from pi_planning.config import Settings, get_settings
from pi_planning.engine.cost import CostDeriver, hours_by_issue
from pi_planning.engine.teams import TeamAliases, is_all_teams
from pi_planning.schemas.budget import BudgetReport, BudgetRow, BudgetTotals
from pi_planning.schemas.planning import Feature, PlanningSnapshot, Story, Team


def _is_empty(row: BudgetRow) -> bool:
    return row.budget == 0 and row.planned == 0 and row.actual == 0


class BudgetRollupEngine:
    """Budget vs. planned vs. actual, with variance measured against plan."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.aliases = TeamAliases(self.settings.team_aliases)
        self.costs = CostDeriver(self.settings)

    @staticmethod
    def _round(value: Decimal, places: int = 2) -> Decimal:
        quantize = Decimal(10) ** -places
        return value.quantize(quantize, rounding=ROUND_HALF_UP)

    def _row(self, key: str, name: str | None, budget: Decimal, planned: Decimal, actual: Decimal,
             progress: int | None = None) -> BudgetRow:
        budget = self._round(budget)
        planned = self._round(planned)
        return BudgetRow(
            key=key,
            name=name,
            budget=budget,
            planned=planned,
            actual=self._round(actual),
            variance=budget - planned,
            progress=progress,
        )

    def split_budget(
        self,
        per_team_budget: dict[str, Decimal],
        team_filter: str,
        teams: list[Team],
    ) -> Decimal:
        """Team share of a budget. No explicit split means 0, even with a total budget."""
        team = self.aliases.resolve(team_filter, teams)
        candidates = [team.id, *self.aliases.synonyms(team.name)] if team else []
        candidates += sorted(self.aliases.synonyms(team_filter))
        for candidate in candidates:
            if candidate in per_team_budget:
                return per_team_budget[candidate]
        return Decimal(0)

    def _in_team(self, story: Story, team_filter: str | None, teams: list[Team]) -> bool:
        if is_all_teams(team_filter):
            return True
        team = self.aliases.resolve(team_filter, teams)
        if team is not None:
            return self.aliases.story_belongs_to(story.team, team)
        return self.aliases.matches(story.team, team_filter)

    def feature_progress(self, stories: list[Story]) -> int:
        """Done SP / total SP × 100, rounded to an integer; 0 without SP."""
        total = sum((s.story_points for s in stories), Decimal(0))
        if total == 0:
            return 0
        done_statuses = {status.lower() for status in self.settings.done_statuses}
        done = sum((s.story_points for s in stories if s.status.strip().lower() in done_statuses), Decimal(0))
        return int((done / total * Decimal(100)).to_integral_value(rounding=ROUND_HALF_UP))

    def feature_rows(
        self,
        snapshot: PlanningSnapshot,
        pi: str,
        team: str | None = None,
        topic: str | None = None,
    ) -> list[BudgetRow]:
        """Every feature of the PI, zero rows included."""
        scoped = snapshot.for_pi(pi)
        rates = self.costs.team_rates(scoped, pi)
        logged = hours_by_issue(scoped.time_entries)
        rows = []
        for feature in scoped.features:
            if topic and feature.topic_key != topic:
                continue
            rows.append(self._feature_row(feature, scoped, rates, logged, team))
        return rows

    def _feature_row(
        self,
        feature: Feature,
        scoped: PlanningSnapshot,
        rates: dict[str, Decimal],
        logged: dict[str, Decimal],
        team_filter: str | None,
    ) -> BudgetRow:
        stories = [
            s for s in scoped.stories
            if s.epic_key == feature.jira_key and self._in_team(s, team_filter, scoped.teams)
        ]
        planned = Decimal(0)
        actual = Decimal(0)
        for story in stories:
            team = self.aliases.resolve(story.team, scoped.teams)
            if team is None:
                continue
            planned += story.story_points * team.story_point_value
            actual += self.costs.story_actual_cost(story, logged, scoped.teams, rates)
        if is_all_teams(team_filter):
            budget = feature.budget
        else:
            budget = self.split_budget(feature.per_team_budget, team_filter, scoped.teams)
        return self._row(feature.jira_key, feature.name, budget, planned, actual, self.feature_progress(stories))

    def topic_rows(
        self,
        snapshot: PlanningSnapshot,
        pi: str,
        team: str | None = None,
        topic: str | None = None,
    ) -> list[BudgetRow]:
        scoped = snapshot.for_pi(pi)
        features = self.feature_rows(scoped, pi, team)
        topic_of = {f.jira_key: f.topic_key for f in scoped.features}
        rows = []
        for item in sorted(scoped.topics, key=lambda t: t.priority):
            if topic and item.key != topic:
                continue
            linked = [row for row in features if topic_of.get(row.key) == item.key]
            if is_all_teams(team):
                budget = item.budget
            else:
                budget = self.split_budget(item.per_team_budget, team, scoped.teams)
            rows.append(
                self._row(
                    item.key,
                    item.name,
                    budget,
                    sum((row.planned for row in linked), Decimal(0)),
                    sum((row.actual for row in linked), Decimal(0)),
                )
            )
        return rows

    def team_rows(self, snapshot: PlanningSnapshot, pi: str) -> list[BudgetRow]:
        return [
            self._row(s.team_id, s.team_name, team.budget, s.planned_cost, s.actual_cost)
            for team, s in zip(snapshot.for_pi(pi).teams, self.costs.team_summaries(snapshot, pi))
        ]

    def report(self, scope: str, rows: list[BudgetRow], team: str | None = None) -> BudgetReport:
        """Drop all-zero rows and total the rest; total variance is recomputed, not summed."""
        shown = [row for row in rows if not _is_empty(row)]
        budget = sum((row.budget for row in shown), Decimal(0))
        planned = sum((row.planned for row in shown), Decimal(0))
        actual = sum((row.actual for row in shown), Decimal(0))
        return BudgetReport(
            scope=scope,
            team=None if is_all_teams(team) else team,
            rows=shown,
            totals=BudgetTotals(budget=budget, planned=planned, actual=actual, variance=budget - planned),
        )

    def topic_report(self, snapshot: PlanningSnapshot, pi: str, team: str | None = None,
                     topic: str | None = None) -> BudgetReport:
        return self.report("topics", self.topic_rows(snapshot, pi, team, topic), team)

    def feature_report(self, snapshot: PlanningSnapshot, pi: str, team: str | None = None,
                       topic: str | None = None) -> BudgetReport:
        return self.report("features", self.feature_rows(snapshot, pi, team, topic), team)

    def team_report(self, snapshot: PlanningSnapshot, pi: str) -> BudgetReport:
        return self.report("teams", self.team_rows(snapshot, pi))
