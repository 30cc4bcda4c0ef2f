"""Plan-derived hourly rates and actual cost of logged time.

There is no salary feed: a team's effective rate is its planned cost divided by
its available development hours (IP sprint excluded), and that rate prices the
hours logged against the team's stories. The rate depends on the plan only.
"""
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal

import structlog

from pi_planning.config import Settings, get_settings
from pi_planning.engine.capacity import CapacityCalculator
from pi_planning.engine.teams import TeamAliases
from pi_planning.schemas.cost import StoryCost, TeamCostSummary
from pi_planning.schemas.planning import PlanningSnapshot, Story, Team, TimeEntry

logger = structlog.get_logger(__name__)


def hours_by_issue(entries: list[TimeEntry]) -> dict[str, Decimal]:
    hours: dict[str, Decimal] = defaultdict(Decimal)
    for entry in entries:
        hours[entry.issue_key] += entry.hours
    return dict(hours)


class CostDeriver:
    """Deterministic cost derivation per team and story. Decimal only."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.aliases = TeamAliases(self.settings.team_aliases)
        self.capacity = CapacityCalculator(self.settings)

    @staticmethod
    def _round(value: Decimal, places: int = 2) -> Decimal:
        quantize = Decimal(10) ** -places
        return value.quantize(quantize, rounding=ROUND_HALF_UP)

    def team_stories(self, stories: list[Story], team: Team) -> list[Story]:
        return [s for s in stories if self.aliases.story_belongs_to(s.team, team)]

    def planned_story_points(self, stories: list[Story], team: Team) -> Decimal:
        return sum((s.story_points for s in self.team_stories(stories, team)), Decimal(0))

    def planned_cost(self, stories: list[Story], team: Team) -> Decimal:
        """Planned Cost = Σ SP × team SP value."""
        return self.planned_story_points(stories, team) * team.story_point_value

    def effective_rate(self, planned_cost: Decimal, available_hours: Decimal) -> Decimal:
        """Effective Rate = Planned Cost / Available Hours, 0 without hours."""
        if available_hours <= 0:
            return Decimal(0)
        return planned_cost / available_hours

    def team_rates(self, snapshot: PlanningSnapshot, pi: str) -> dict[str, Decimal]:
        """Effective rate per team id."""
        scoped = snapshot.for_pi(pi)
        rates: dict[str, Decimal] = {}
        for team in scoped.teams:
            hours = self.capacity.available_dev_hours(
                scoped.developers, scoped.availabilities, team.name, teams=scoped.teams
            )
            rates[team.id] = self.effective_rate(self.planned_cost(scoped.stories, team), hours)
        return rates

    def story_actual_cost(
        self,
        story: Story,
        logged: dict[str, Decimal],
        teams: list[Team],
        rates: dict[str, Decimal],
    ) -> Decimal:
        """Actual Cost = logged hours × effective rate of the story's team."""
        team = self.aliases.resolve(story.team, teams)
        if team is None:
            return Decimal(0)
        rate = rates.get(team.id, Decimal(0))
        if rate <= 0:
            return Decimal(0)
        return logged.get(story.key, Decimal(0)) * rate

    def story_costs(self, snapshot: PlanningSnapshot, pi: str) -> list[StoryCost]:
        """Planned and actual cost per story. Stories of unknown teams cost 0 but are kept."""
        scoped = snapshot.for_pi(pi)
        rates = self.team_rates(scoped, pi)
        logged = hours_by_issue(scoped.time_entries)
        result = []
        for story in scoped.stories:
            team = self.aliases.resolve(story.team, scoped.teams)
            if team is None and story.team:
                logger.debug("story_team_unknown", story=story.key, team=story.team, pi=pi)
            planned = story.story_points * team.story_point_value if team else Decimal(0)
            result.append(
                StoryCost(
                    key=story.key,
                    team=story.team,
                    team_id=team.id if team else None,
                    story_points=story.story_points,
                    planned_cost=self._round(planned),
                    logged_hours=logged.get(story.key, Decimal(0)),
                    actual_cost=self._round(self.story_actual_cost(story, logged, scoped.teams, rates)),
                )
            )
        return result

    def team_summaries(self, snapshot: PlanningSnapshot, pi: str) -> list[TeamCostSummary]:
        scoped = snapshot.for_pi(pi)
        logged = hours_by_issue(scoped.time_entries)
        summaries = []
        for team in scoped.teams:
            stories = self.team_stories(scoped.stories, team)
            planned_sp = sum((s.story_points for s in stories), Decimal(0))
            planned_cost = planned_sp * team.story_point_value
            hours = self.capacity.available_dev_hours(
                scoped.developers, scoped.availabilities, team.name, teams=scoped.teams
            )
            rate = self.effective_rate(planned_cost, hours)
            team_logged = sum((logged.get(s.key, Decimal(0)) for s in stories), Decimal(0))
            actual = team_logged * rate if rate > 0 else Decimal(0)
            summaries.append(
                TeamCostSummary(
                    team_id=team.id,
                    team_name=team.name,
                    story_count=len(stories),
                    planned_story_points=planned_sp,
                    story_point_value=team.story_point_value,
                    planned_cost=self._round(planned_cost),
                    available_hours=hours,
                    effective_rate=self._round(rate),
                    logged_hours=team_logged,
                    actual_cost=self._round(actual),
                )
            )
        return summaries
