"""Planning snapshot schemas: the raw, PI-scoped inputs the engine consumes."""
import datetime
import math
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, NamedTuple

import structlog
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

logger = structlog.get_logger(__name__)


def lenient_decimal(value: Any) -> Decimal | None:
    """Coerce a loosely typed number. Blank or non-numeric input yields None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


class PlanningModel(BaseModel):
    """Base for snapshot entities: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Developer(PlanningModel):
    key: str
    team: str = ""
    name: str | None = None
    stack: str | None = None
    daily_hours: Decimal | None = None
    work_ratio: Decimal | None = None
    load: Decimal | None = None
    develop_ratio: Decimal | None = None
    maintain_ratio: Decimal | None = None
    manage_ratio: Decimal | None = None
    velocity: Decimal | None = None
    internal_cost: Decimal | None = None
    special_case: bool = False
    sprint_teams: dict[str, str] = Field(default_factory=dict)
    pi: str | None = None

    @field_validator(
        "daily_hours",
        "work_ratio",
        "load",
        "develop_ratio",
        "maintain_ratio",
        "manage_ratio",
        "velocity",
        "internal_cost",
        mode="before",
    )
    @classmethod
    def _lenient_number(cls, value: Any) -> Decimal | None:
        return lenient_decimal(value)

    @field_validator("team", mode="before")
    @classmethod
    def _blank_team(cls, value: Any) -> str:
        return value or ""

    @field_validator("special_case", mode="before")
    @classmethod
    def _special_case(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("sprint_teams", mode="before")
    @classmethod
    def _drop_empty_overrides(cls, value: Any) -> dict[str, str]:
        if not value:
            return {}
        return {sprint: team for sprint, team in dict(value).items() if team}

    def team_for_sprint(self, sprint: str) -> str:
        """Per-sprint override team, else the home team."""
        return self.sprint_teams.get(sprint) or self.team


_AVAILABILITY_FIELDS = {"id", "date", "sprint", "pi", "availability"}


class AvailabilityDay(PlanningModel):
    """One calendar day of a PI with the per-developer availability fractions.

    A developer without an entry is fully available on that day.
    """

    date: str
    sprint: str = ""
    pi: str | None = None
    availability: dict[str, Decimal] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _fold_developer_columns(cls, data: Any) -> Any:
        # Stored rows carry developer keys as top-level fields.
        if not isinstance(data, dict):
            return data
        extra = {k: v for k, v in data.items() if k not in _AVAILABILITY_FIELDS}
        if not extra:
            return data
        folded = {k: v for k, v in data.items() if k in _AVAILABILITY_FIELDS}
        folded["availability"] = {**extra, **dict(data.get("availability") or {})}
        return folded

    @field_validator("date", mode="before")
    @classmethod
    def _date_text(cls, value: Any) -> str:
        if isinstance(value, (datetime.date, datetime.datetime)):
            return value.isoformat()[:10]
        return "" if value is None else str(value)

    @field_validator("sprint", mode="before")
    @classmethod
    def _blank_sprint(cls, value: Any) -> str:
        return value or ""

    @field_validator("availability", mode="before")
    @classmethod
    def _fractions(cls, value: Any) -> dict[str, Decimal]:
        fractions: dict[str, Decimal] = {}
        for key, raw in dict(value or {}).items():
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue
            parsed = lenient_decimal(raw)
            if parsed is None:
                logger.warning("availability_value_unparseable", developer=key, value=raw)
                parsed = Decimal(0)
            fractions[key] = parsed
        return fractions

    def fraction(self, developer_key: str) -> Decimal:
        return self.availability.get(developer_key, Decimal(1))


class Story(PlanningModel):
    key: str
    name: str | None = None
    story_points: Decimal = Field(
        default=Decimal(0),
        validation_alias=AliasChoices("storyPoints", "story_points", "sp"),
    )
    team: str = ""
    status: str = ""
    sprint: str = ""
    epic_key: str = Field(
        default="",
        validation_alias=AliasChoices("epicKey", "epic_key", "epic"),
    )
    pi: str | None = None

    @field_validator("story_points", mode="before")
    @classmethod
    def _points(cls, value: Any) -> Decimal:
        return lenient_decimal(value) or Decimal(0)

    @field_validator("team", "status", "sprint", "epic_key", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> str:
        return value or ""


class TimeEntry(PlanningModel):
    issue_key: str = Field(validation_alias=AliasChoices("issueKey", "issue_key", "jiraKey"))
    sprint_label: str = Field(
        default="",
        validation_alias=AliasChoices("sprintLabel", "sprint_label", "sprint"),
    )
    hours: Decimal = Field(
        default=Decimal(0),
        validation_alias=AliasChoices("hours", "totalHours"),
    )
    pi: str | None = None

    @field_validator("hours", mode="before")
    @classmethod
    def _hours(cls, value: Any) -> Decimal:
        return lenient_decimal(value) or Decimal(0)


class Team(PlanningModel):
    id: str
    name: str
    story_point_value: Decimal = Field(
        default=Decimal(0),
        validation_alias=AliasChoices("storyPointValue", "story_point_value", "spValue"),
    )
    budget: Decimal = Field(
        default=Decimal(0),
        validation_alias=AliasChoices("budget", "pibBudget"),
    )

    @field_validator("story_point_value", "budget", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Decimal:
        return lenient_decimal(value) or Decimal(0)


def _team_budgets(value: Any) -> dict[str, Decimal]:
    budgets: dict[str, Decimal] = {}
    for team, amount in dict(value or {}).items():
        parsed = lenient_decimal(amount)
        if parsed is not None:
            budgets[team] = parsed
    return budgets


class Feature(PlanningModel):
    jira_key: str = Field(validation_alias=AliasChoices("jiraKey", "jira_key", "jiraId"))
    name: str | None = None
    budget: Decimal = Field(
        default=Decimal(0),
        validation_alias=AliasChoices("budget", "pibBudget"),
    )
    per_team_budget: dict[str, Decimal] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("perTeamBudget", "per_team_budget", "teamBudgets"),
    )
    topic_key: str = ""
    epic_owner: str | None = None
    pi: str | None = None

    @field_validator("budget", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Decimal:
        return lenient_decimal(value) or Decimal(0)

    @field_validator("per_team_budget", mode="before")
    @classmethod
    def _split(cls, value: Any) -> dict[str, Decimal]:
        return _team_budgets(value)


class Topic(PlanningModel):
    key: str
    name: str | None = None
    priority: int = 0
    budget: Decimal = Field(
        default=Decimal(0),
        validation_alias=AliasChoices("budget", "pibBudget"),
    )
    per_team_budget: dict[str, Decimal] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("perTeamBudget", "per_team_budget", "teamBudgets"),
    )
    pi: str | None = None

    @field_validator("budget", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Decimal:
        return lenient_decimal(value) or Decimal(0)

    @field_validator("per_team_budget", mode="before")
    @classmethod
    def _split(cls, value: Any) -> dict[str, Decimal]:
        return _team_budgets(value)


class SprintMetric(str, Enum):
    DEV = "dev"
    MAINTAIN = "maintain"
    MANAGE = "manage"
    ABSENCE = "absence"
    SP = "sp"
    ISSUES = "issues"
    BUGS_CREATED = "bugsCreated"
    BUGS_CLOSED = "bugsClosed"
    BUGS_OPEN = "bugsOpen"
    DEFECT_RATIO = "defectRatio"
    CYCLE_TIME_BUGS = "cycleTimeBugs"
    CYCLE_TIME_COLLABS = "cycleTimeCollabs"


class MetricKind(str, Enum):
    PLAN = "plan"
    ACTUAL = "actual"


class MetricKey(NamedTuple):
    sprint_index: int
    metric: SprintMetric
    kind: MetricKind

    @classmethod
    def parse(cls, raw: str) -> "MetricKey | None":
        """Parse a stored ``{sprintIdx}-{metric}-{type}`` key."""
        parts = str(raw).split("-")
        if len(parts) != 3:
            return None
        index, metric, kind = parts
        try:
            return cls(int(index), SprintMetric(metric), MetricKind(kind))
        except ValueError:
            return None

    def __str__(self) -> str:
        return f"{self.sprint_index}-{self.metric.value}-{self.kind.value}"


class SprintMetricEntry(PlanningModel):
    """Plan/actual figures entered for one team in one PI."""

    team_id: str
    pi: str | None = None
    values: dict[MetricKey, Decimal] = Field(default_factory=dict)

    @field_validator("values", mode="before")
    @classmethod
    def _keyed_values(cls, value: Any) -> dict[MetricKey, Decimal]:
        parsed: dict[MetricKey, Decimal] = {}
        for raw_key, raw_value in dict(value or {}).items():
            key = raw_key if isinstance(raw_key, MetricKey) else MetricKey.parse(raw_key)
            if key is None:
                logger.warning("sprint_metric_key_ignored", key=raw_key)
                continue
            number = lenient_decimal(raw_value)
            if number is not None:
                parsed[key] = number
        return parsed

    @field_serializer("values")
    def _serialize_values(self, values: dict[MetricKey, Decimal]) -> dict[str, Decimal]:
        return {str(k): v for k, v in values.items()}

    def get(self, sprint_index: int, metric: SprintMetric, kind: MetricKind) -> Decimal | None:
        return self.values.get(MetricKey(sprint_index, metric, kind))


def _in_pi(item: Any, pi: str) -> bool:
    return item.pi is None or item.pi == pi


class PlanningSnapshot(PlanningModel):
    """Immutable, in-memory view of every collection the engine reads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    developers: list[Developer] = Field(default_factory=list)
    availabilities: list[AvailabilityDay] = Field(default_factory=list)
    stories: list[Story] = Field(default_factory=list)
    time_entries: list[TimeEntry] = Field(default_factory=list)
    teams: list[Team] = Field(default_factory=list)
    features: list[Feature] = Field(default_factory=list)
    topics: list[Topic] = Field(default_factory=list)
    sprint_metrics: list[SprintMetricEntry] = Field(default_factory=list)

    def for_pi(self, pi: str) -> "PlanningSnapshot":
        """Copy restricted to entities of one PI. Unscoped entities are kept."""
        return self.model_copy(
            update={
                "developers": [d for d in self.developers if _in_pi(d, pi)],
                "availabilities": [a for a in self.availabilities if _in_pi(a, pi)],
                "stories": [s for s in self.stories if _in_pi(s, pi)],
                "time_entries": [e for e in self.time_entries if _in_pi(e, pi)],
                "features": [f for f in self.features if _in_pi(f, pi)],
                "topics": [t for t in self.topics if _in_pi(t, pi)],
                "sprint_metrics": [m for m in self.sprint_metrics if _in_pi(m, pi)],
            }
        )
