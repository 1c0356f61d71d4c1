"""Shared test fixtures."""

import pytest

from groupstage.config import Settings
from groupstage.models.game import PlayedGroupGame
from groupstage.models.group import Group


def played(game_id: int, home: int, away: int, score: tuple[int, int]) -> PlayedGroupGame:
    return PlayedGroupGame.try_new(game_id, home, away, score)


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(groupstage_env="test")


@pytest.fixture
def points_group() -> Group:
    """One round of a 4-team group, strict on points alone: 3, 1, 2, 0."""
    return Group.try_new(
        [],
        [
            played(0, 0, 1, (0, 2)),
            played(1, 2, 3, (1, 1)),
            played(2, 2, 3, (0, 1)),
        ],
    )


@pytest.fixture
def head_to_head_group() -> Group:
    """Teams 0 and 1 level on points, goal difference and goals; 0 won their game."""
    return Group.try_new(
        [],
        [
            played(0, 0, 2, (1, 0)),
            played(1, 1, 2, (1, 0)),
            played(2, 1, 2, (1, 0)),
            played(3, 0, 1, (1, 0)),
            played(4, 0, 3, (0, 1)),
        ],
    )


@pytest.fixture
def level_pair_group() -> Group:
    """Two teams that no sub-ordering can separate."""
    return Group.try_new([], [played(0, 0, 1, (0, 0))])
