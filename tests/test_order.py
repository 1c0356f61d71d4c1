"""Tests for the greedy group ordering."""

import random

import pytest

from groupstage.core.order import (
    GroupOrder,
    MissingStatisticError,
    NonStrictGroupOrder,
    NonStrictOrderError,
    Rules,
    SubOrdering,
    apply_rule,
    order_group,
    refine,
)
from groupstage.core.fair_play import FIFA_WEIGHTS, FairPlayWeights
from groupstage.core.presets import fifa_2018
from groupstage.core.tiebreakers import Manual
from groupstage.models.game import FairPlay, FairPlayScore, PlayedGroupGame
from groupstage.models.group import Group, GroupError
from groupstage.models.rules import Scope, StatKind


def _game(game_id: int, home: int, away: int, score: tuple[int, int]) -> PlayedGroupGame:
    return PlayedGroupGame.try_new(game_id, home, away, score)


def _order(*teams: int) -> GroupOrder:
    return GroupOrder(tuple(teams))


class TestGroupOrder:
    def test_winner_and_runner_up(self):
        order = _order(3, 1, 2, 0)
        assert order.winner() == 3
        assert order.runner_up() == 1
        assert order[2] == 2
        assert list(order) == [3, 1, 2, 0]
        assert len(order) == 4
        assert order.rank_of(0) == 3

    def test_rejects_duplicates(self):
        with pytest.raises(NonStrictOrderError):
            _order(1, 1, 2)

    def test_from_strict(self):
        order = GroupOrder.from_non_strict(NonStrictGroupOrder.of([[2], [0], [1]]))
        assert order == _order(2, 0, 1)

    def test_from_non_strict_fails(self):
        with pytest.raises(NonStrictOrderError):
            GroupOrder.from_non_strict(NonStrictGroupOrder.of([[2], [0, 1]]))

    def test_non_strict_error_is_group_error(self):
        assert issubclass(NonStrictOrderError, GroupError)


class TestNonStrictGroupOrder:
    def test_init_is_one_subset(self, points_group):
        order = NonStrictGroupOrder.init(points_group)
        assert order.subsets == ((0, 1, 2, 3),)
        assert not order.is_strict()

    def test_init_empty_group(self):
        assert NonStrictGroupOrder.init(Group()).subsets == ()

    def test_rejects_empty_subset(self):
        with pytest.raises(ValueError):
            NonStrictGroupOrder.of([[1], []])

    def test_decided_positions(self):
        order = NonStrictGroupOrder.of([[4], [0, 1], [2]])
        assert order.decided() == {4: 0, 2: 3}
        assert order.teams() == [4, 0, 1, 2]


class TestSubOrdering:
    def test_splits_by_value_best_first(self, points_group):
        rule = SubOrdering(StatKind.POINTS)
        assert rule.order(points_group, (0, 1, 2, 3)).subsets == ((3,), (1,), (2,), (0,))

    def test_equal_values_share_subset_in_input_order(self):
        group = Group.try_new([], [_game(0, 0, 1, (1, 1)), _game(1, 2, 3, (0, 1))])
        rule = SubOrdering(StatKind.POINTS)
        assert rule.order(group, (1, 0, 2, 3)).subsets == ((3,), (1, 0), (2,))

    def test_internal_ignores_games_outside_subset(self):
        # 0 beat 1, but 1 thrashed 2
        group = Group.try_new([], [_game(0, 0, 1, (1, 0)), _game(1, 1, 2, (5, 0))])
        assert SubOrdering(StatKind.GOAL_DIFF).order(group, (0, 1)).subsets == ((1,), (0,))
        internal = SubOrdering(StatKind.GOAL_DIFF, Scope.INTERNAL)
        assert internal.order(group, (0, 1)).subsets == ((0,), (1,))

    def test_missing_statistic_is_fatal(self, points_group):
        rule = SubOrdering(StatKind.POINTS)
        with pytest.raises(MissingStatisticError):
            rule.order(points_group, (0, 42))

    def test_label(self):
        assert SubOrdering(StatKind.WINS, Scope.INTERNAL).label() == "wins/internal"

    def test_injected_card_weights_change_order(self):
        cards = FairPlayScore(home=FairPlay(indirect_red=1), away=FairPlay(yellow=2))
        group = Group.try_new([], [PlayedGroupGame.try_new(0, 0, 1, (0, 0), cards)])
        lenient = FairPlayWeights(yellow=-1, indirect_red=-1, direct_red=-2, yellow_direct_red=-3)
        fifa = SubOrdering(StatKind.FAIR_PLAY_FIFA)
        custom = SubOrdering(StatKind.FAIR_PLAY_FIFA, weights=lenient)
        assert fifa.order(group, (0, 1)).subsets == ((1,), (0,))
        assert custom.order(group, (0, 1)).subsets == ((0,), (1,))

    def test_weights_rejected_for_other_statistics(self):
        with pytest.raises(ValueError):
            SubOrdering(StatKind.GOAL_DIFF, weights=FIFA_WEIGHTS)


class TestRefinement:
    def test_singletons_never_reach_the_rule(self, points_group):
        class Exploding(SubOrdering):
            def order(self, group, tied):
                raise AssertionError(f"rule applied to {tied}")

        order = NonStrictGroupOrder.of([[3], [1], [2], [0]])
        assert apply_rule(points_group, Exploding(StatKind.POINTS), order) == order

    def test_stops_once_strict(self, points_group):
        calls = []

        class Counting(SubOrdering):
            def order(self, group, tied):
                calls.append(self.stat)
                return super().order(group, tied)

        rules = [Counting(StatKind.POINTS), Counting(StatKind.GOAL_DIFF)]
        result = refine(points_group, rules)
        assert result.is_strict()
        assert calls == [StatKind.POINTS]

    def test_no_rules_keeps_initial_order(self, points_group):
        assert refine(points_group, []) == NonStrictGroupOrder.init(points_group)

    def test_partition_and_monotonic_decisions(self, head_to_head_group):
        group = head_to_head_group
        order = NonStrictGroupOrder.init(group)
        for rule in fifa_2018().non_strict:
            previous = order
            order = apply_rule(group, rule, order)
            assert sorted(order.teams()) == list(group.teams())
            assert all(order.subsets)
            for team, position in previous.decided().items():
                assert order.decided()[team] == position


class TestFifa2018Ordering:
    def test_point_order(self, points_group):
        assert order_group(points_group, fifa_2018()) == _order(3, 1, 2, 0)

    def test_points_scored_goals_discrepancy(self):
        group = Group.try_new(
            [],
            [
                _game(0, 0, 1, (0, 1)),
                _game(1, 2, 3, (1, 0)),
                _game(2, 0, 2, (0, 0)),
                _game(3, 1, 3, (5, 5)),
            ],
        )
        assert order_group(group, fifa_2018()) == _order(1, 2, 3, 0)

    def test_primary_stats_order(self):
        group = Group.try_new([], [_game(0, 0, 1, (0, 2)), _game(1, 2, 3, (1, 0))])
        assert order_group(group, fifa_2018()) == _order(1, 2, 3, 0)

    def test_fair_play_order(self):
        cards = FairPlayScore(home=FairPlay(yellow=1), away=FairPlay())
        group = Group.try_new([], [PlayedGroupGame.try_new(0, 0, 1, (0, 0), cards)])
        assert order_group(group, fifa_2018()) == _order(1, 0)

    def test_head_to_head_decides(self, head_to_head_group):
        assert order_group(head_to_head_group, fifa_2018()) == _order(0, 1, 3, 2)

    def test_deterministic_without_random_draw(self, head_to_head_group):
        rules = fifa_2018()
        first = order_group(head_to_head_group, rules)
        assert all(order_group(head_to_head_group, rules) == first for _ in range(5))

    def test_complete_order(self, head_to_head_group):
        order = order_group(head_to_head_group, fifa_2018())
        assert len(order) == len(head_to_head_group.teams())
        assert set(order) == set(head_to_head_group.teams())

    def test_tied_teams_reach_tiebreaker(self, level_pair_group):
        rules = fifa_2018(random.Random(3))
        assert sorted(order_group(level_pair_group, rules)) == [0, 1]

    def test_tiebreaker_only_sees_tied_subset(self):
        group = Group.try_new(
            [],
            [
                _game(0, 0, 1, (0, 0)),
                _game(1, 0, 3, (1, 0)),
                _game(2, 1, 3, (1, 0)),
                _game(3, 2, 3, (1, 0)),
            ],
        )
        # 0 and 1 level on everything, ahead of 2; 3 last.
        rules = Rules(fifa_2018().non_strict, Manual.from_winners([(1, 0)]))
        assert order_group(group, rules) == _order(1, 0, 2, 3)

    def test_empty_group(self):
        assert len(order_group(Group(), fifa_2018())) == 0
