#!/usr/bin/env python3
"""
Candidate Generator

Pairs each transaction with the fuel logs close enough in time to be worth
scoring. Fuel logs are bucketed by calendar day, so each transaction checks
at most ``2 * tolerance + 1`` buckets instead of the whole fuel log list.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable

from ..core.quarters import QuarterWindow
from .errors import CandidateGenerationError
from .models import CandidatePair, ComparisonRecord

logger = logging.getLogger(__name__)

DEFAULT_DATE_TOLERANCE_DAYS = 3


def validate_window(window: QuarterWindow | None) -> None:
    """
    Reject windows that would make a run meaningless.

    Raises:
        CandidateGenerationError: If the window ends before it starts
    """
    if window is not None and not window.is_valid:
        raise CandidateGenerationError(f"Window end {window.end} is before start {window.start}")


def filter_to_window(
    records: Iterable[ComparisonRecord], window: QuarterWindow | None
) -> list[ComparisonRecord]:
    """Keep records dated inside the inclusive window (all records when window is None)."""
    if window is None:
        return list(records)
    return [r for r in records if window.contains(r.date)]


def generate_candidates(
    transactions: Iterable[ComparisonRecord],
    fuel_logs: Iterable[ComparisonRecord],
    window: QuarterWindow | None,
    tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS,
) -> list[CandidatePair]:
    """
    Produce candidate pairs within ``tolerance_days`` of each other.

    Both inputs are first filtered to the window. Pairs are only formed
    between records of the same driver when both carry a driver id.

    Args:
        transactions: Normalized transaction records
        fuel_logs: Normalized fuel log records
        window: Inclusive date window, or None for no date bound
        tolerance_days: Maximum calendar-day distance within a pair

    Returns:
        Candidate pairs ordered by (transaction date, fuel log date, ids)

    Raises:
        CandidateGenerationError: If the window is inverted or tolerance negative
    """
    validate_window(window)
    if tolerance_days < 0:
        raise CandidateGenerationError(f"Date tolerance must be non-negative, got {tolerance_days}")

    in_window_transactions = filter_to_window(transactions, window)
    in_window_fuel_logs = filter_to_window(fuel_logs, window)

    if not in_window_transactions or not in_window_fuel_logs:
        return []

    buckets: dict[int, list[ComparisonRecord]] = defaultdict(list)
    for fuel_log in in_window_fuel_logs:
        buckets[fuel_log.date.ordinal()].append(fuel_log)

    pairs: list[CandidatePair] = []
    for transaction in in_window_transactions:
        day = transaction.date.ordinal()
        for offset in range(-tolerance_days, tolerance_days + 1):
            for fuel_log in buckets.get(day + offset, ()):
                if transaction.driver_id and fuel_log.driver_id and transaction.driver_id != fuel_log.driver_id:
                    continue
                pairs.append(CandidatePair(transaction=transaction, fuel_log=fuel_log))

    pairs.sort(key=lambda p: (p.transaction.date, p.fuel_log.date, p.transaction.id, p.fuel_log.id))

    logger.debug(
        "Generated %d candidate pairs from %d transactions and %d fuel logs",
        len(pairs),
        len(in_window_transactions),
        len(in_window_fuel_logs),
    )
    return pairs
