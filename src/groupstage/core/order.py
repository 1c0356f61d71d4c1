"""Group ordering.

A group is ordered by a prioritised list of sub-orderings followed by a final
tiebreaker. The ordering is greedy: the next sub-ordering only runs while the
order is non-strict, and only on the subsets that are still tied. Once the
rules are exhausted, the tiebreaker maps whatever is left to a strict order.

Because a rule only ever sees genuinely tied teams, rule priority decides both
regulatory correctness (points before head-to-head) and cost (the internal
statistics only run on the few teams that need them).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NewType

from groupstage.core.fair_play import FairPlayWeights
from groupstage.core.stats import team_stats
from groupstage.models.group import Group, GroupError
from groupstage.models.rules import FAIR_PLAY_KINDS, RuleSpec, Scope, StatKind
from groupstage.models.team import TeamId

if TYPE_CHECKING:
    from groupstage.core.tiebreakers import Tiebreaker

logger = logging.getLogger(__name__)

GroupRank = NewType("GroupRank", int)
"""Index into a GroupOrder: 0 is the group winner."""


class NonStrictOrderError(GroupError):
    """A non-strict order was used where a strict one is required."""


class MissingStatisticError(RuntimeError):
    """A tied team has no statistic value. Indicates a bug, not bad input."""


@dataclass(frozen=True)
class GroupOrder:
    """Strict group order, best team first."""

    teams: tuple[TeamId, ...]

    def __post_init__(self) -> None:
        if len(set(self.teams)) != len(self.teams):
            raise NonStrictOrderError(f"Duplicate team in group order {self.teams}")

    @classmethod
    def from_non_strict(cls, order: NonStrictGroupOrder) -> GroupOrder:
        """Cast a non-strict order whose subsets are all singletons."""
        if not order.is_strict():
            raise NonStrictOrderError(f"Order is not strict: {order.subsets}")
        return cls(tuple(subset[0] for subset in order))

    def winner(self) -> TeamId:
        return self.teams[0]

    def runner_up(self) -> TeamId:
        return self.teams[1]

    def rank_of(self, team: TeamId) -> GroupRank:
        return GroupRank(self.teams.index(team))

    def __getitem__(self, rank: int) -> TeamId:
        return self.teams[rank]

    def __iter__(self) -> Iterator[TeamId]:
        return iter(self.teams)

    def __len__(self) -> int:
        return len(self.teams)


@dataclass(frozen=True)
class NonStrictGroupOrder:
    """Intermediate group order: best-to-worst subsets of equal teams.

    The subsets partition the teams being ordered; none of them is empty.
    """

    subsets: tuple[tuple[TeamId, ...], ...] = ()

    def __post_init__(self) -> None:
        if any(not subset for subset in self.subsets):
            msg = f"Empty subset in group order {self.subsets}"
            raise ValueError(msg)

    @classmethod
    def init(cls, group: Group) -> NonStrictGroupOrder:
        """All teams of the group, equal."""
        teams = group.teams()
        return cls((teams,) if teams else ())

    @classmethod
    def of(cls, subsets: Iterable[Iterable[int]]) -> NonStrictGroupOrder:
        return cls(tuple(tuple(TeamId(t) for t in subset) for subset in subsets))

    def is_strict(self) -> bool:
        return all(len(subset) == 1 for subset in self.subsets)

    def teams(self) -> list[TeamId]:
        """Flattened teams, best first; tied teams in subset order."""
        return [team for subset in self.subsets for team in subset]

    def decided(self) -> dict[TeamId, int]:
        """Position of every team already alone in its subset."""
        decided: dict[TeamId, int] = {}
        position = 0
        for subset in self.subsets:
            if len(subset) == 1:
                decided[subset[0]] = position
            position += len(subset)
        return decided

    def __add__(self, other: NonStrictGroupOrder) -> NonStrictGroupOrder:
        return NonStrictGroupOrder(self.subsets + other.subsets)

    def __iter__(self) -> Iterator[tuple[TeamId, ...]]:
        return iter(self.subsets)

    def __len__(self) -> int:
        return len(self.subsets)


@dataclass(frozen=True)
class SubOrdering:
    """Total, non-strict order of a tied subset by one statistic.

    With ``Scope.ALL`` the statistic is computed from every game of the group,
    regardless of which teams are being ordered. With ``Scope.INTERNAL`` only
    the games among the tied teams count (head-to-head).

    ``weights`` replaces the regulation's card table for a fair-play statistic.
    """

    stat: StatKind
    scope: Scope = Scope.ALL
    weights: FairPlayWeights | None = None

    def __post_init__(self) -> None:
        if self.weights is not None and self.stat not in FAIR_PLAY_KINDS:
            raise ValueError(f"Card weights do not apply to statistic {self.stat.value!r}")

    @classmethod
    def from_spec(cls, spec: RuleSpec) -> SubOrdering:
        weights = FairPlayWeights.from_config(spec.weights) if spec.weights else None
        return cls(stat=spec.stat, scope=spec.scope, weights=weights)

    def label(self) -> str:
        return f"{self.stat.value}/{self.scope.value}"

    def order(self, group: Group, tied: Sequence[TeamId]) -> NonStrictGroupOrder:
        """Split ``tied`` (at least two teams) into best-to-worst subsets."""
        stats = team_stats(
            self.stat,
            group,
            tied,
            internal=self.scope is Scope.INTERNAL,
            weights=self.weights,
        )
        missing = [team for team in tied if team not in stats]
        if missing:
            logger.error("No %s value for teams %s in group %s", self.label(), missing, group.id)
            raise MissingStatisticError(f"No {self.label()} value for teams {missing}")

        # Stable: teams with equal values keep their relative input order.
        ranked = sorted(tied, key=lambda team: stats[team], reverse=True)
        subsets: list[list[TeamId]] = []
        previous: int | None = None
        for team in ranked:
            value = stats[team]
            if subsets and value == previous:
                subsets[-1].append(team)
            else:
                subsets.append([team])
            previous = value
        return NonStrictGroupOrder(tuple(tuple(s) for s in subsets))


@dataclass(frozen=True)
class Rules:
    """Group ordering rules: sub-orderings in priority order plus a tiebreaker.

    The sub-orderings may leave the order non-strict, which is why every rule
    set also carries the tiebreaker that maps the leftovers to a strict order.
    """

    non_strict: tuple[SubOrdering, ...]
    tiebreaker: Tiebreaker
    name: str = field(default="custom", compare=False)

    @classmethod
    def from_specs(
        cls, specs: Iterable[RuleSpec], tiebreaker: Tiebreaker, name: str = "custom"
    ) -> Rules:
        return cls(tuple(SubOrdering.from_spec(s) for s in specs), tiebreaker, name)


def apply_rule(group: Group, rule: SubOrdering, order: NonStrictGroupOrder) -> NonStrictGroupOrder:
    """Refine every tied subset of ``order`` with ``rule``; singletons pass through."""
    refined = NonStrictGroupOrder()
    for subset in order:
        if len(subset) > 1:
            refined = refined + rule.order(group, subset)
        else:
            refined = refined + NonStrictGroupOrder((subset,))
    return refined


def refine(
    group: Group,
    rules: Iterable[SubOrdering],
    order: NonStrictGroupOrder | None = None,
) -> NonStrictGroupOrder:
    """Apply sub-orderings in priority order until the order is strict."""
    current = order if order is not None else NonStrictGroupOrder.init(group)
    for rule in rules:
        if current.is_strict():
            break
        current = apply_rule(group, rule, current)
        logger.debug("Group %s after %s: %s", group.id, rule.label(), current.subsets)
    return current


def order_group(group: Group, rules: Rules) -> GroupOrder:
    """Order a group: greedy sub-orderings, then the tiebreaker if still needed."""
    possibly_non_strict = refine(group, rules.non_strict)
    if possibly_non_strict.is_strict():
        return GroupOrder.from_non_strict(possibly_non_strict)
    logger.info(
        "Group %s still tied after %d rules of %s, using %s",
        group.id,
        len(rules.non_strict),
        rules.name,
        type(rules.tiebreaker).__name__,
    )
    return rules.tiebreaker.order(group, possibly_non_strict)
