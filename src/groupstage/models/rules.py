"""Rule configuration models — a rule set described as data.

A rule set is an ordered list of sub-ordering criteria followed by exactly one
tiebreaker. These models are what YAML rule files and the preset registry are
made of; ``groupstage.core.presets.build_rules`` turns them into ``Rules``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, model_validator


class StatKind(str, Enum):
    """The closed catalogue of per-game statistics."""

    POINTS = "points"
    GOAL_DIFF = "goal_diff"
    GOALS_SCORED = "goals_scored"
    WINS = "wins"
    FAIR_PLAY_FIFA = "fair_play_fifa"
    FAIR_PLAY_UEFA = "fair_play_uefa"


class Scope(str, Enum):
    """Which games a statistic is computed over."""

    ALL = "all"
    INTERNAL = "internal"  # only games among the currently tied teams


FAIR_PLAY_KINDS = frozenset({StatKind.FAIR_PLAY_FIFA, StatKind.FAIR_PLAY_UEFA})


class CardWeights(BaseModel):
    """Fair-play penalty per card category, replacing a regulation's table."""

    model_config = {"frozen": True}

    yellow: int = Field(le=0)
    indirect_red: int = Field(le=0)
    direct_red: int = Field(le=0)
    yellow_direct_red: int = Field(le=0)


class RuleSpec(BaseModel):
    """One sub-ordering criterion: a statistic and the games it covers.

    ``weights`` only applies to the fair-play statistics.
    """

    model_config = {"frozen": True}

    stat: StatKind
    scope: Scope = Scope.ALL
    weights: CardWeights | None = None

    @model_validator(mode="after")
    def _weights_need_fair_play(self) -> RuleSpec:
        if self.weights is not None and self.stat not in FAIR_PLAY_KINDS:
            msg = f"Card weights given for non fair-play statistic {self.stat.value!r}"
            raise ValueError(msg)
        return self

    def label(self) -> str:
        return f"{self.stat.value}/{self.scope.value}"


class RandomTiebreakConfig(BaseModel):
    """Drawing of lots."""

    kind: Literal["random"] = "random"
    seed: int | None = None


class RankingTiebreakConfig(BaseModel):
    """External ranking position per team; lower is better."""

    kind: Literal["ranking"] = "ranking"
    ranks: dict[int, int] = Field(default_factory=dict)


class ManualOutcome(BaseModel):
    """An externally decided outcome between two teams."""

    better: int
    worse: int

    @model_validator(mode="after")
    def _distinct(self) -> ManualOutcome:
        if self.better == self.worse:
            msg = f"Manual outcome compares team {self.better} with itself"
            raise ValueError(msg)
        return self


class ManualTiebreakConfig(BaseModel):
    """Replays a historical tiebreak decision pair by pair."""

    kind: Literal["manual"] = "manual"
    outcomes: list[ManualOutcome] = Field(default_factory=list)


TiebreakConfig = Annotated[
    RandomTiebreakConfig | RankingTiebreakConfig | ManualTiebreakConfig,
    Field(discriminator="kind"),
]


class RulesConfig(BaseModel):
    """A complete, named regulation."""

    name: str = "custom"
    rules: list[RuleSpec] = Field(default_factory=list)
    tiebreaker: TiebreakConfig = Field(default_factory=RandomTiebreakConfig)

    def labels(self) -> list[str]:
        return [r.label() for r in self.rules]
