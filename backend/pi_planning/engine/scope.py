"""PI scope by workflow status (burndown view)."""
from decimal import Decimal

from pi_planning.config import Settings, get_settings
from pi_planning.engine.teams import TeamAliases, is_all_teams
from pi_planning.schemas.planning import PlanningSnapshot, Story
from pi_planning.schemas.scope import ScopeReport, ScopeStory, StatusBucket

STATUS_BUCKETS = ("Done", "Testing", "Code Review", "Started", "Blocked", "Open")

# Listing order; Blocked sorts after Open.
_STATUS_RANK = {"Done": 1, "Testing": 2, "Code Review": 3, "Started": 4, "Open": 5, "Blocked": 6}

_STATUS_MAP = {
    "done": "Done",
    "in testing": "Testing",
    "ready for testing": "Testing",
    "ready design review": "Testing",
    "testing": "Testing",
    "ready for code review": "Code Review",
    "code review": "Code Review",
    "in development": "Started",
    "started": "Started",
    "blocked": "Blocked",
}


def normalize_status(status: str | None) -> str:
    """Map a tracker status to one of the six buckets; anything unknown is Open."""
    return _STATUS_MAP.get((status or "").strip().lower(), "Open")


def scope_by_status(
    snapshot: PlanningSnapshot,
    pi: str,
    feature: str | None = None,
    team: str | None = None,
    settings: Settings | None = None,
) -> ScopeReport:
    settings = settings or get_settings()
    aliases = TeamAliases(settings.team_aliases)
    scoped = snapshot.for_pi(pi)

    def selected(story: Story) -> bool:
        if feature and feature != "all" and story.epic_key != feature:
            return False
        if is_all_teams(team):
            return True
        known = aliases.resolve(team, scoped.teams)
        if known is not None:
            return aliases.story_belongs_to(story.team, known)
        return aliases.matches(story.team, team)

    stories = [s for s in scoped.stories if selected(s)]
    points = {status: Decimal(0) for status in STATUS_BUCKETS}
    for story in stories:
        points[normalize_status(story.status)] += story.story_points

    buckets = [StatusBucket(status=s, story_points=p) for s, p in points.items() if p > 0]
    listed = sorted(stories, key=lambda s: (s.sprint, _STATUS_RANK[normalize_status(s.status)]))
    return ScopeReport(
        feature=None if not feature or feature == "all" else feature,
        team=None if is_all_teams(team) else team,
        buckets=buckets,
        total=sum((b.story_points for b in buckets), Decimal(0)),
        stories=[
            ScopeStory(
                key=s.key,
                name=s.name,
                team=s.team,
                sprint=s.sprint,
                epic_key=s.epic_key,
                status=normalize_status(s.status),
                story_points=s.story_points,
            )
            for s in listed
        ],
    )
