"""Standings across several groups and the qualifiers they produce."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from groupstage.core.order import GroupOrder, GroupRank, Rules, order_group
from groupstage.models.group import Group
from groupstage.models.team import TeamId

logger = logging.getLogger(__name__)


def group_standings(groups: Iterable[Group], rules: Rules) -> dict[str, GroupOrder]:
    """Order every group with the same rule set, keyed by group id."""
    orders: dict[str, GroupOrder] = {}
    for group in groups:
        if group.id in orders:
            raise ValueError(f"Group id {group.id!r} appears more than once")
        orders[group.id] = order_group(group, rules)
    logger.info("Ordered %d groups with %s", len(orders), rules.name)
    return orders


def advancing(
    orders: Mapping[str, GroupOrder],
    per_group: int = 2,
) -> list[tuple[str, GroupRank, TeamId]]:
    """Qualifiers as ``(group id, rank, team)`` rows.

    Rows are sorted by rank first, then group id: all group winners, then all
    runners-up, which is the order bracket seeding consumes them in.
    """
    if per_group < 1:
        raise ValueError(f"per_group must be at least 1, got {per_group}")
    rows: list[tuple[str, GroupRank, TeamId]] = []
    for group_id, order in orders.items():
        if len(order) < per_group:
            raise ValueError(
                f"Group {group_id} has {len(order)} teams, cannot advance {per_group}"
            )
        rows.extend((group_id, GroupRank(rank), order[rank]) for rank in range(per_group))
    return sorted(rows, key=lambda row: (row[1], row[0]))
