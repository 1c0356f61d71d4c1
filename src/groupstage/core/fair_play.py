"""Card counts to fair-play value conversion.

The value is a non-positive integer: the closer to zero, the better the
team's conduct. FIFA and UEFA weigh a direct red card differently.
"""

from __future__ import annotations

from dataclasses import dataclass

from groupstage.models.game import FairPlay
from groupstage.models.rules import CardWeights


@dataclass(frozen=True)
class FairPlayWeights:
    """Penalty per card category. All weights are negative or zero."""

    yellow: int
    indirect_red: int
    direct_red: int
    yellow_direct_red: int

    @classmethod
    def from_config(cls, config: CardWeights) -> FairPlayWeights:
        return cls(
            yellow=config.yellow,
            indirect_red=config.indirect_red,
            direct_red=config.direct_red,
            yellow_direct_red=config.yellow_direct_red,
        )

    def value(self, cards: FairPlay) -> int:
        return (
            cards.yellow * self.yellow
            + cards.indirect_red * self.indirect_red
            + cards.direct_red * self.direct_red
            + cards.yellow_direct_red * self.yellow_direct_red
        )


# FIFA World Cup 2018 regulations, art. 32 (5) lit. g
FIFA_WEIGHTS = FairPlayWeights(yellow=-1, indirect_red=-3, direct_red=-4, yellow_direct_red=-5)

# UEFA EURO 2020 regulations, art. 20.01 lit. i
UEFA_WEIGHTS = FairPlayWeights(yellow=-1, indirect_red=-3, direct_red=-3, yellow_direct_red=-5)
