#!/usr/bin/env python3
"""
Assignment Resolver

Turns overlapping scored candidates into a one-to-one assignment.

Candidates are ranked by confidence, then by transaction date and fuel log
date (earliest first), then by ids so the ranking is total. Walking that
ranking, a candidate is accepted when neither its transaction nor its fuel
log has been claimed yet.

This greedy pass is an approximation of optimal bipartite assignment (for
example the Hungarian algorithm). With only three confidence tiers and rare
ties inside a tier the two almost never differ, and greedy keeps the result
easy to explain to the people reviewing reports.
"""

import logging
from collections.abc import Iterable

from .models import Match, ScoredMatch

logger = logging.getLogger(__name__)


def _rank(scored: ScoredMatch) -> tuple:
    return (
        -scored.confidence,
        scored.pair.transaction.date,
        scored.pair.fuel_log.date,
        scored.transaction_id,
        scored.fuel_log_id,
    )


def resolve(scored_matches: Iterable[ScoredMatch]) -> list[Match]:
    """
    Select a conflict-free assignment.

    Every transaction id and every fuel log id appears in at most one
    returned Match. The same input always yields the same output.
    """
    claimed_transactions: set[str] = set()
    claimed_fuel_logs: set[str] = set()
    accepted: list[Match] = []
    rejected = 0

    for scored in sorted(scored_matches, key=_rank):
        if scored.transaction_id in claimed_transactions or scored.fuel_log_id in claimed_fuel_logs:
            rejected += 1
            continue

        claimed_transactions.add(scored.transaction_id)
        claimed_fuel_logs.add(scored.fuel_log_id)
        accepted.append(Match.from_scored(scored))

    if rejected:
        logger.debug("Resolver dropped %d conflicting candidates", rejected)

    return accepted
