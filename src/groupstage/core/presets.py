"""Rule-set presets and rule-set construction from configuration.

Presets are plain lists of ``RuleSpec`` composed from the same primitives as
any custom rule set; a new regulation is one more registry entry or one more
YAML file, never new ordering code.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping
from pathlib import Path

import yaml

from groupstage.core.order import Rules
from groupstage.core.tiebreakers import Manual, Random, Ranking, Tiebreaker
from groupstage.models.group import Group
from groupstage.models.rules import (
    ManualTiebreakConfig,
    RandomTiebreakConfig,
    RankingTiebreakConfig,
    RuleSpec,
    RulesConfig,
    Scope,
    StatKind,
)

logger = logging.getLogger(__name__)

# FIFA World Cup 2018, art. 32 (5):
#   a) to c) points, goal difference, goals scored in all group matches
#   d) to f) the same three among the teams concerned
#   g) fair play conduct in all group matches
#   h) drawing of lots
FIFA_2018_RULES: list[RuleSpec] = [
    RuleSpec(stat=StatKind.POINTS, scope=Scope.ALL),
    RuleSpec(stat=StatKind.GOAL_DIFF, scope=Scope.ALL),
    RuleSpec(stat=StatKind.GOALS_SCORED, scope=Scope.ALL),
    RuleSpec(stat=StatKind.POINTS, scope=Scope.INTERNAL),
    RuleSpec(stat=StatKind.GOAL_DIFF, scope=Scope.INTERNAL),
    RuleSpec(stat=StatKind.GOALS_SCORED, scope=Scope.INTERNAL),
    RuleSpec(stat=StatKind.FAIR_PLAY_FIFA, scope=Scope.ALL),
]

# UEFA EURO 2020, art. 20.01. Criterion d) (re-applying a) to c) to the teams
# still level) and the last-round penalty shoot-out are not modelled.
EURO_2020_RULES: list[RuleSpec] = [
    RuleSpec(stat=StatKind.POINTS, scope=Scope.ALL),
    RuleSpec(stat=StatKind.POINTS, scope=Scope.INTERNAL),
    RuleSpec(stat=StatKind.GOAL_DIFF, scope=Scope.INTERNAL),
    RuleSpec(stat=StatKind.GOALS_SCORED, scope=Scope.INTERNAL),
    RuleSpec(stat=StatKind.GOAL_DIFF, scope=Scope.ALL),
    RuleSpec(stat=StatKind.WINS, scope=Scope.ALL),
    RuleSpec(stat=StatKind.FAIR_PLAY_UEFA, scope=Scope.INTERNAL),
]

PRESET_RULES: dict[str, list[RuleSpec]] = {
    "fifa_2018": FIFA_2018_RULES,
    "euro_2020": EURO_2020_RULES,
}

# Tiebreaker kind each preset's regulation prescribes
PRESET_TIEBREAKERS: dict[str, str] = {
    "fifa_2018": "random",
    "euro_2020": "ranking",
}


def fifa_2018(rng: random.Random | None = None) -> Rules:
    """FIFA World Cup 2018 group order, ending in a drawing of lots."""
    return Rules.from_specs(FIFA_2018_RULES, Random(rng), name="fifa_2018")


def euro_2020(ranking: Ranking) -> Rules:
    """UEFA EURO 2020 group order, ending in the qualifiers ranking."""
    return Rules.from_specs(EURO_2020_RULES, ranking, name="euro_2020")


def preset_config(
    name: str,
    seed: int | None = None,
    ranks: Mapping[int, int] | None = None,
) -> RulesConfig:
    """The registry preset ``name`` as a ``RulesConfig``."""
    if name not in PRESET_RULES:
        raise KeyError(f"Unknown preset {name!r}, known presets: {sorted(PRESET_RULES)}")
    if PRESET_TIEBREAKERS[name] == "ranking":
        tiebreaker: RandomTiebreakConfig | RankingTiebreakConfig = RankingTiebreakConfig(
            ranks=dict(ranks or {})
        )
    else:
        tiebreaker = RandomTiebreakConfig(seed=seed)
    return RulesConfig(name=name, rules=list(PRESET_RULES[name]), tiebreaker=tiebreaker)


def build_tiebreaker(
    config: RandomTiebreakConfig | RankingTiebreakConfig | ManualTiebreakConfig,
    groups: Iterable[Group] = (),
    rng: random.Random | None = None,
) -> Tiebreaker:
    """Instantiate a tiebreaker, validating it against ``groups`` where possible."""
    if isinstance(config, RankingTiebreakConfig):
        return Ranking.try_new(groups, config.ranks)
    if isinstance(config, ManualTiebreakConfig):
        return Manual.from_winners((o.better, o.worse) for o in config.outcomes)
    if rng is None and config.seed is not None:
        rng = random.Random(config.seed)
    return Random(rng)


def build_rules(
    config: RulesConfig,
    groups: Iterable[Group] = (),
    rng: random.Random | None = None,
) -> Rules:
    """Turn a ``RulesConfig`` into ``Rules``.

    Configuration errors (e.g. an unranked team) surface here, before any
    group is ordered.
    """
    tiebreaker = build_tiebreaker(config.tiebreaker, groups, rng)
    rules = Rules.from_specs(config.rules, tiebreaker, name=config.name)
    logger.debug("Built rule set %s: %s + %s", config.name, config.labels(), config.tiebreaker.kind)
    return rules


def save_rules_yaml(config: RulesConfig, path: Path) -> None:
    """Save a rule set configuration to YAML."""
    data = config.model_dump(mode="json")
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_rules_yaml(path: Path) -> RulesConfig:
    """Load a rule set configuration from YAML."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return RulesConfig.model_validate(data)
