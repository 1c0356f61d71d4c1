"""Per-game statistics and their aggregation over a group.

Every statistic yields a ``(home, away)`` delta per played game. Aggregation
starts each team at zero and folds the deltas in, either over every game of
the group or only over the games among a subset of teams (head-to-head).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from groupstage.core.fair_play import FIFA_WEIGHTS, UEFA_WEIGHTS, FairPlayWeights
from groupstage.models.game import PlayedGroupGame
from groupstage.models.group import Group
from groupstage.models.rules import StatKind
from groupstage.models.team import TeamId

# Points per result
WIN_POINTS = 3
DRAW_POINTS = 1
LOSS_POINTS = 0


def _points(game: PlayedGroupGame) -> tuple[int, int]:
    if game.score.home > game.score.away:
        return WIN_POINTS, LOSS_POINTS
    if game.score.home < game.score.away:
        return LOSS_POINTS, WIN_POINTS
    return DRAW_POINTS, DRAW_POINTS


def _goal_diff(game: PlayedGroupGame) -> tuple[int, int]:
    diff = game.score.home - game.score.away
    return diff, -diff


def _goals_scored(game: PlayedGroupGame) -> tuple[int, int]:
    return game.score.home, game.score.away


def _wins(game: PlayedGroupGame) -> tuple[int, int]:
    winner = game.winner
    return int(winner == game.home), int(winner == game.away)


def _fair_play(game: PlayedGroupGame, weights: FairPlayWeights) -> tuple[int, int]:
    return weights.value(game.fair_play.home), weights.value(game.fair_play.away)


STAT_FUNCTIONS: dict[StatKind, Callable[[PlayedGroupGame], tuple[int, int]]] = {
    StatKind.POINTS: _points,
    StatKind.GOAL_DIFF: _goal_diff,
    StatKind.GOALS_SCORED: _goals_scored,
    StatKind.WINS: _wins,
}

# Card table each fair-play statistic uses unless weights are passed in
DEFAULT_WEIGHTS: dict[StatKind, FairPlayWeights] = {
    StatKind.FAIR_PLAY_FIFA: FIFA_WEIGHTS,
    StatKind.FAIR_PLAY_UEFA: UEFA_WEIGHTS,
}


def game_stat(
    kind: StatKind,
    game: PlayedGroupGame,
    weights: FairPlayWeights | None = None,
) -> tuple[int, int]:
    """Statistic delta ``(home, away)`` of one played game.

    ``weights`` replaces the default card table of a fair-play statistic.
    """
    if kind in DEFAULT_WEIGHTS:
        return _fair_play(game, weights if weights is not None else DEFAULT_WEIGHTS[kind])
    if weights is not None:
        raise ValueError(f"Card weights do not apply to statistic {kind.value!r}")
    return STAT_FUNCTIONS[kind](game)


def _fold(
    kind: StatKind,
    teams: Iterable[TeamId],
    games: Iterable[PlayedGroupGame],
    weights: FairPlayWeights | None,
) -> dict[TeamId, int]:
    totals: dict[TeamId, int] = {team: 0 for team in teams}
    for game in games:
        home_delta, away_delta = game_stat(kind, game, weights)
        totals[TeamId(game.home)] += home_delta
        totals[TeamId(game.away)] += away_delta
    return totals


def aggregate_all(
    kind: StatKind,
    group: Group,
    weights: FairPlayWeights | None = None,
) -> dict[TeamId, int]:
    """Statistic per team over every played game of the group.

    Teams without a played game are present with value 0.
    """
    return _fold(kind, group.teams(), group.played_games, weights)


def aggregate_internal(
    kind: StatKind,
    group: Group,
    subset: Iterable[TeamId],
    weights: FairPlayWeights | None = None,
) -> dict[TeamId, int]:
    """Statistic per team over the games played among ``subset`` only."""
    members = tuple(subset)
    return _fold(kind, members, group.internal_games(members), weights)


def team_stats(
    kind: StatKind,
    group: Group,
    subset: Iterable[TeamId] | None = None,
    internal: bool = False,
    weights: FairPlayWeights | None = None,
) -> dict[TeamId, int]:
    """Aggregate over the whole group, or head-to-head within ``subset``."""
    if internal:
        if subset is None:
            msg = "An internal statistic needs the subset of teams it is computed over"
            raise ValueError(msg)
        return aggregate_internal(kind, group, subset, weights)
    stats = aggregate_all(kind, group, weights)
    if subset is None:
        return stats
    return {team: stats[team] for team in subset if team in stats}
