"""Group model: the read-only input of the ordering engine.

A group is a set of teams plus the games played (and still to be played)
between them. Every game participant must be a group member.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field, model_validator

from groupstage.models.game import PlayedGroupGame, UnplayedGroupGame
from groupstage.models.team import TeamId

logger = logging.getLogger(__name__)


class GroupError(Exception):
    """Base class for invalid group input and ordering failures."""


class DuplicateGameError(GroupError):
    """The same game id appears more than once in a group."""


class UnknownTeamError(GroupError):
    """A game references a team that is not a member of the group."""


def check_group(
    team_ids: frozenset[int] | None,
    played: Iterable[PlayedGroupGame],
    unplayed: Iterable[UnplayedGroupGame],
) -> None:
    """Raise a GroupError subclass if the games do not fit the team set."""
    seen: set[int] = set()
    for game in [*played, *unplayed]:
        if game.id in seen:
            raise DuplicateGameError(f"Game id {game.id} is listed more than once")
        seen.add(game.id)
        if team_ids is None:
            continue
        for team in game.teams:
            if team not in team_ids:
                raise UnknownTeamError(f"Game {game.id} references team {team} outside the group")


class Group(BaseModel):
    """Teams and games of one round-robin group.

    The team set is the union of ``team_ids`` (when given) and every game
    participant, so a group may be built from its games alone.
    """

    model_config = {"frozen": True}

    id: str = "A"
    played_games: tuple[PlayedGroupGame, ...] = ()
    unplayed_games: tuple[UnplayedGroupGame, ...] = ()
    team_ids: frozenset[int] | None = Field(default=None)

    @model_validator(mode="after")
    def _games_fit_teams(self) -> Group:
        try:
            check_group(self.team_ids, self.played_games, self.unplayed_games)
        except GroupError as exc:
            raise ValueError(str(exc)) from exc
        return self

    @classmethod
    def try_new(
        cls,
        unplayed_games: Iterable[UnplayedGroupGame],
        played_games: Iterable[PlayedGroupGame],
        team_ids: Iterable[int] | None = None,
        group_id: str = "A",
    ) -> Group:
        """Build a group, raising GroupError rather than a ValidationError."""
        played = tuple(played_games)
        unplayed = tuple(unplayed_games)
        teams = frozenset(team_ids) if team_ids is not None else None
        try:
            check_group(teams, played, unplayed)
        except GroupError:
            logger.warning("Rejected group %s", group_id)
            raise
        return cls(id=group_id, played_games=played, unplayed_games=unplayed, team_ids=teams)

    def teams(self) -> tuple[TeamId, ...]:
        """All team ids in ascending order."""
        members: set[int] = set(self.team_ids or ())
        for game in [*self.played_games, *self.unplayed_games]:
            members.update(game.teams)
        return tuple(TeamId(t) for t in sorted(members))

    def internal_games(self, subset: Iterable[int]) -> list[PlayedGroupGame]:
        """Played games where both participants belong to ``subset``."""
        members = set(subset)
        return [g for g in self.played_games if g.home in members and g.away in members]
