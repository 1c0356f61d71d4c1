"""Tiebreakers: the terminal step that guarantees a strict group order.

A tiebreaker sorts each subset still tied after the sub-orderings with a
pairwise comparison and splices the result back in place. Teams already
decided keep their positions.

Comparisons are posed as "compare a to b": a positive result means ``a`` is
better than ``b``.
"""

from __future__ import annotations

import functools
import logging
import random
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence

from groupstage.core.order import GroupOrder, NonStrictGroupOrder
from groupstage.models.group import Group, GroupError
from groupstage.models.team import Team, TeamId

logger = logging.getLogger(__name__)


class TiebreakerConfigError(GroupError):
    """A tiebreaker was configured with data that cannot resolve its groups."""


class RankingError(TiebreakerConfigError):
    """A team of a group has no ranking position."""


class MissingComparisonError(RuntimeError):
    """A manual tiebreaker was asked about a pair it has no outcome for.

    Raised during ordering. Not recoverable: the outcome was decided outside
    the system and cannot be synthesised.
    """


class Tiebreaker(ABC):
    """Maps a (possibly) non-strict order to a strict one."""

    def order(self, group: Group, non_strict: NonStrictGroupOrder) -> GroupOrder:
        teams: list[TeamId] = []
        for subset in non_strict:
            if len(subset) == 1:
                teams.append(subset[0])
            else:
                teams.extend(self.order_sub_group(group, subset))
        return GroupOrder(tuple(teams))

    def order_sub_group(self, group: Group, tied: Sequence[TeamId]) -> list[TeamId]:
        """Best-first order of one tied subset."""
        return sorted(tied, key=functools.cmp_to_key(self.cmp), reverse=True)

    @abstractmethod
    def cmp(self, team_1: TeamId, team_2: TeamId) -> int:
        """Positive if ``team_1`` is better than ``team_2``, negative if worse."""


class Manual(Tiebreaker):
    """Replays a tiebreak decided outside the system.

    Some tiebreaks are out of our hands, e.g. FIFA's drawing of lots. To
    reproduce an actual tournament, the outcome of every pair that ends up
    tied is supplied explicitly.
    """

    def __init__(self, outcomes: Mapping[tuple[int, int], int] | None = None) -> None:
        table: dict[tuple[TeamId, TeamId], int] = {}
        for (a, b), result in (outcomes or {}).items():
            if a == b or result == 0:
                raise TiebreakerConfigError(f"Invalid manual outcome {result} for ({a}, {b})")
            sign = 1 if result > 0 else -1
            key, reverse = (TeamId(a), TeamId(b)), (TeamId(b), TeamId(a))
            if table.get(reverse, -sign) != -sign:
                raise TiebreakerConfigError(f"Conflicting manual outcomes for teams {a} and {b}")
            table[key] = sign
            table[reverse] = -sign
        self._table = table

    @classmethod
    def from_winners(cls, pairs: Iterable[tuple[int, int]]) -> Manual:
        """Build from ``(better, worse)`` pairs."""
        return cls({(better, worse): 1 for better, worse in pairs})

    def cmp(self, team_1: TeamId, team_2: TeamId) -> int:
        try:
            return self._table[(team_1, team_2)]
        except KeyError:
            logger.error("Manual tiebreaker has no outcome for teams %s and %s", team_1, team_2)
            raise MissingComparisonError(
                f"Comparison between teams {team_1} and {team_2} does not exist"
            ) from None


class Random(Tiebreaker):
    """Drawing of lots.

    Every comparison draws a fresh, unbiased bit from ``rng``. Repeated
    comparisons of the same pair are independent and need not be consistent
    within one sort; the resulting order is still a valid random permutation
    of the tied teams, just not a uniformly distributed one. Pass a seeded or
    mocked ``random.Random`` for reproducible results.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    @classmethod
    def seeded(cls, seed: int) -> Random:
        return cls(random.Random(seed))

    def cmp(self, team_1: TeamId, team_2: TeamId) -> int:
        return 1 if self.rng.getrandbits(1) else -1


class Ranking(Tiebreaker):
    """External ranking, e.g. the European Qualifiers overall ranking.

    A lower rank value is better. The ranking is checked against the groups it
    will order when it is built, so an unranked team fails before any ordering
    runs. Asking about a team outside those groups is a ``RankingError`` too.
    """

    def __init__(self, groups: Iterable[Group], ranking: Mapping[int, int]) -> None:
        missing = sorted(
            {team for group in groups for team in group.teams() if team not in ranking}
        )
        if missing:
            logger.warning("Ranking tiebreaker is missing teams %s", missing)
            raise RankingError(f"No ranking for teams {missing}")
        self._ranking = {TeamId(team): rank for team, rank in ranking.items()}

    @classmethod
    def try_new(cls, groups: Iterable[Group], ranking: Mapping[int, int]) -> Ranking:
        """Fails with RankingError if any team of ``groups`` is unranked."""
        return cls(groups, ranking)

    @classmethod
    def from_teams(cls, groups: Iterable[Group], teams: Iterable[Team]) -> Ranking:
        return cls(groups, {team.id: team.rank for team in teams})

    def rank(self, team: TeamId) -> int:
        try:
            return self._ranking[team]
        except KeyError:
            logger.warning("Ranking tiebreaker was asked about unranked team %s", team)
            raise RankingError(f"No ranking for team {team}") from None

    def cmp(self, team_1: TeamId, team_2: TeamId) -> int:
        # Smaller rank is better, hence the reversed comparison.
        rank_1, rank_2 = self.rank(team_1), self.rank(team_2)
        return (rank_2 > rank_1) - (rank_2 < rank_1)
