#!/usr/bin/env python3
"""Tests for candidate pair generation."""

import pytest

from fuelrec.core.quarters import QuarterWindow
from fuelrec.matching.candidates import generate_candidates
from fuelrec.matching.errors import CandidateGenerationError
from tests.fixtures.records import fl, tx


def _pair_ids(pairs):
    return [(p.transaction.id, p.fuel_log.id) for p in pairs]


@pytest.mark.matching
class TestGenerateCandidates:
    """Test pairing by date proximity."""

    def test_pairs_within_tolerance(self):
        """Test records up to three days apart are paired, four are not."""
        transactions = [tx("t1", "2024-07-10")]
        fuel_logs = [fl("f-3", "2024-07-07"), fl("f+3", "2024-07-13"), fl("f+4", "2024-07-14")]

        pairs = generate_candidates(transactions, fuel_logs, window=None)

        assert _pair_ids(pairs) == [("t1", "f-3"), ("t1", "f+3")]

    def test_custom_tolerance(self):
        """Test tolerance zero only pairs same-day records."""
        pairs = generate_candidates(
            [tx("t1", "2024-07-10")],
            [fl("f0", "2024-07-10"), fl("f1", "2024-07-11")],
            window=None,
            tolerance_days=0,
        )
        assert _pair_ids(pairs) == [("t1", "f0")]

    def test_empty_side_yields_no_pairs(self):
        """Test no fuel logs means no candidates and no error."""
        assert generate_candidates([tx("t1", "2024-07-10")], [], window=None) == []
        assert generate_candidates([], [fl("f1", "2024-07-10")], window=None) == []

    def test_window_filters_both_sides(self):
        """Test records outside the window never pair, even within tolerance."""
        window = QuarterWindow.from_quarter_string("2024-Q3")
        transactions = [tx("t-in", "2024-07-01"), tx("t-out", "2024-06-30")]
        fuel_logs = [fl("f-in", "2024-07-02"), fl("f-out", "2024-06-29")]

        pairs = generate_candidates(transactions, fuel_logs, window)

        assert _pair_ids(pairs) == [("t-in", "f-in")]

    def test_window_bounds_are_inclusive(self):
        """Test records on the first and last day of the window are kept."""
        window = QuarterWindow.from_dates("2024-07-01", "2024-07-31")
        pairs = generate_candidates(
            [tx("t-first", "2024-07-01"), tx("t-last", "2024-07-31")],
            [fl("f-first", "2024-07-01"), fl("f-last", "2024-07-31")],
            window,
        )
        assert ("t-first", "f-first") in _pair_ids(pairs)
        assert ("t-last", "f-last") in _pair_ids(pairs)

    def test_inverted_window_raises(self):
        """Test end before start fails the run."""
        window = QuarterWindow.from_dates("2024-07-31", "2024-07-01")
        with pytest.raises(CandidateGenerationError):
            generate_candidates([tx("t1", "2024-07-10")], [fl("f1", "2024-07-10")], window)

    def test_negative_tolerance_raises(self):
        """Test negative tolerance fails the run."""
        with pytest.raises(CandidateGenerationError):
            generate_candidates([], [], window=None, tolerance_days=-1)

    def test_different_drivers_never_pair(self):
        """Test records of different drivers are kept apart."""
        pairs = generate_candidates(
            [tx("t1", "2024-07-10", driver_id="a")],
            [fl("f1", "2024-07-10", driver_id="b")],
            window=None,
        )
        assert pairs == []

    def test_order_is_deterministic(self):
        """Test output order does not depend on input order."""
        transactions = [tx("t2", "2024-07-11"), tx("t1", "2024-07-10")]
        fuel_logs = [fl("f2", "2024-07-11"), fl("f1", "2024-07-10")]

        forward = generate_candidates(transactions, fuel_logs, None)
        backward = generate_candidates(list(reversed(transactions)), list(reversed(fuel_logs)), None)

        assert _pair_ids(forward) == _pair_ids(backward)
        assert _pair_ids(forward)[0] == ("t1", "f1")
