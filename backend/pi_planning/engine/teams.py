"""Team-name resolution shared by every team membership check."""
from typing import Iterable

from pi_planning.schemas.planning import Team

ALL_TEAMS = "all"


def is_all_teams(team: str | None) -> bool:
    """None, blank, or "all" (any case) selects every team."""
    return team is None or not team.strip() or team.strip().lower() == ALL_TEAMS


class TeamAliases:
    """Bidirectional lookup between historical long team names and short codes."""

    def __init__(self, aliases: dict[str, str]) -> None:
        self._to_short = {long.strip(): short.strip() for long, short in aliases.items()}
        self._to_long = {short: long for long, short in self._to_short.items()}

    def canonical(self, name: str | None) -> str:
        """Short code for a known long form, otherwise the name itself."""
        name = (name or "").strip()
        return self._to_short.get(name, name)

    def synonyms(self, name: str | None) -> set[str]:
        name = (name or "").strip()
        if not name:
            return set()
        names = {name}
        if name in self._to_short:
            names.add(self._to_short[name])
        if name in self._to_long:
            names.add(self._to_long[name])
        return names

    def matches(self, candidate: str | None, team_name: str | None) -> bool:
        """True when both name the same team. Blank names never match."""
        left = self.canonical(candidate)
        right = self.canonical(team_name)
        return bool(left) and left == right

    def story_belongs_to(self, story_team: str | None, team: Team) -> bool:
        """Stories carry free text: a team name, a team id, or an alias."""
        if not story_team:
            return False
        return self.matches(story_team, team.name) or story_team.strip() == team.id

    def same_team(self, candidate: str | None, team_filter: str | None, teams: Iterable[Team] = ()) -> bool:
        """Like ``matches``, but a known team's id also names that team."""
        if self.matches(candidate, team_filter):
            return True
        known = self.resolve(team_filter, teams)
        return known is not None and self.story_belongs_to(candidate, known)

    def label(self, name: str | None, teams: Iterable[Team] = ()) -> str:
        """Canonical team name; a team id resolves to its team's name."""
        known = self.resolve(name, teams)
        return self.canonical(known.name if known else name)

    def resolve(self, name: str | None, teams: Iterable[Team]) -> Team | None:
        """Team record for a free-text name or id, or None when unknown."""
        if not name or not name.strip():
            return None
        for team in teams:
            if self.story_belongs_to(name, team):
                return team
        return None
