"""Group game models: fixtures, results and disciplinary records.

A played game is immutable once constructed; statistics are derived from it
but never written back.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, Field, model_validator


class Score(BaseModel):
    """Final score of a game."""

    model_config = {"frozen": True}

    home: int = Field(default=0, ge=0)
    away: int = Field(default=0, ge=0)

    @classmethod
    def of(cls, home: int, away: int) -> Score:
        return cls(home=home, away=away)


class FairPlay(BaseModel):
    """Cards received by one side in a single game."""

    model_config = {"frozen": True}

    yellow: int = Field(default=0, ge=0)
    indirect_red: int = Field(default=0, ge=0)  # second yellow
    direct_red: int = Field(default=0, ge=0)
    yellow_direct_red: int = Field(default=0, ge=0)


class FairPlayScore(BaseModel):
    """Cards received by both sides in a single game."""

    model_config = {"frozen": True}

    home: FairPlay = Field(default_factory=FairPlay)
    away: FairPlay = Field(default_factory=FairPlay)


class _GroupGameBase(BaseModel):
    model_config = {"frozen": True}

    id: int = Field(ge=0)
    home: int = Field(ge=0)
    away: int = Field(ge=0)
    date: datetime.date

    @model_validator(mode="after")
    def _distinct_teams(self) -> _GroupGameBase:
        if self.home == self.away:
            msg = f"Game {self.id}: a team cannot play itself (team {self.home})"
            raise ValueError(msg)
        return self

    @property
    def teams(self) -> tuple[int, int]:
        return self.home, self.away


class UnplayedGroupGame(_GroupGameBase):
    """A scheduled fixture without a result. Ignored by every statistic."""


class PlayedGroupGame(_GroupGameBase):
    """A finished group game with its score and fair-play record."""

    score: Score
    fair_play: FairPlayScore = Field(default_factory=FairPlayScore)

    @classmethod
    def try_new(
        cls,
        game_id: int,
        home: int,
        away: int,
        score: tuple[int, int],
        fair_play: FairPlayScore | None = None,
        date: datetime.date | None = None,
    ) -> PlayedGroupGame:
        """Positional constructor used by fixtures and the storage layer."""
        return cls(
            id=game_id,
            home=home,
            away=away,
            score=Score.of(*score),
            fair_play=fair_play or FairPlayScore(),
            date=date or datetime.date(2018, 6, 14),
        )

    @property
    def winner(self) -> int | None:
        """Winning team id, or None for a draw."""
        if self.score.home > self.score.away:
            return self.home
        if self.score.home < self.score.away:
            return self.away
        return None
