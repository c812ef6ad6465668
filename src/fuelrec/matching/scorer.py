#!/usr/bin/env python3
"""
Match Scoring Rules

Ordered heuristic rules for deciding whether a candidate pair is the same
fuel purchase. The first rule that fires wins, so a pair that agrees on
both cost and supplier is always scored as ``date_cost``.

Confidences are fixed per rule rather than derived from distances.
"""

import logging
import re
from decimal import Decimal

from .candidates import DEFAULT_DATE_TOLERANCE_DAYS
from .models import CandidatePair, MatchType, ScoredMatch

logger = logging.getLogger(__name__)


class RuleConfidence:
    """Confidence assigned by each rule."""

    DATE_COST = 0.95
    DATE_QUANTITY = 0.85
    DATE_SUPPLIER_STATE = 0.60

    @staticmethod
    def for_type(match_type: MatchType) -> float:
        return {
            MatchType.DATE_COST: RuleConfidence.DATE_COST,
            MatchType.DATE_QUANTITY: RuleConfidence.DATE_QUANTITY,
            MatchType.DATE_SUPPLIER_STATE: RuleConfidence.DATE_SUPPLIER_STATE,
        }[match_type]


# Strictly less than one cent / one hundredth of a gallon
AMOUNT_TOLERANCE = Decimal("0.01")
QUANTITY_TOLERANCE = Decimal("0.01")

_CORPORATE_SUFFIXES = re.compile(r"\b(inc|corp|llc|co|company|ltd)\b")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")

STATE_ABBREVIATIONS = {
    "alabama": "al",
    "alaska": "ak",
    "arizona": "az",
    "arkansas": "ar",
    "california": "ca",
    "colorado": "co",
    "connecticut": "ct",
    "delaware": "de",
    "district of columbia": "dc",
    "florida": "fl",
    "georgia": "ga",
    "hawaii": "hi",
    "idaho": "id",
    "illinois": "il",
    "indiana": "in",
    "iowa": "ia",
    "kansas": "ks",
    "kentucky": "ky",
    "louisiana": "la",
    "maine": "me",
    "maryland": "md",
    "massachusetts": "ma",
    "michigan": "mi",
    "minnesota": "mn",
    "mississippi": "ms",
    "missouri": "mo",
    "montana": "mt",
    "nebraska": "ne",
    "nevada": "nv",
    "new hampshire": "nh",
    "new jersey": "nj",
    "new mexico": "nm",
    "new york": "ny",
    "north carolina": "nc",
    "north dakota": "nd",
    "ohio": "oh",
    "oklahoma": "ok",
    "oregon": "or",
    "pennsylvania": "pa",
    "rhode island": "ri",
    "south carolina": "sc",
    "south dakota": "sd",
    "tennessee": "tn",
    "texas": "tx",
    "utah": "ut",
    "vermont": "vt",
    "virginia": "va",
    "washington": "wa",
    "west virginia": "wv",
    "wisconsin": "wi",
    "wyoming": "wy",
}


def normalize_supplier_name(name: str | None) -> str:
    """Lowercase, drop corporate suffixes, then drop everything but letters and digits."""
    if not name:
        return ""
    lowered = _CORPORATE_SUFFIXES.sub("", name.lower())
    return _NON_ALPHANUMERIC.sub("", lowered)


def supplier_names_match(first: str | None, second: str | None) -> bool:
    """
    Case-insensitive substring match in either direction.

    An empty normalized name matches nothing.
    """
    a = normalize_supplier_name(first)
    b = normalize_supplier_name(second)
    if not a or not b:
        return False
    return a in b or b in a


def normalize_state(state: str | None) -> str:
    """Map a state name or abbreviation to its lowercase USPS code."""
    if not state:
        return ""
    cleaned = " ".join(state.lower().replace(".", "").split())
    return STATE_ABBREVIATIONS.get(cleaned, cleaned)


def states_match(first: str | None, second: str | None) -> bool:
    a = normalize_state(first)
    b = normalize_state(second)
    return bool(a) and a == b


class MatchScorer:
    """Applies the ordered rules to candidate pairs."""

    def __init__(self, date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS):
        """
        Initialize the scorer.

        Args:
            date_tolerance_days: Day distance allowed by the supplier/state rule
        """
        self.date_tolerance_days = date_tolerance_days

    def score(self, pair: CandidatePair) -> ScoredMatch | None:
        """
        Score a candidate pair.

        Returns:
            ScoredMatch for the first rule satisfied, or None
        """
        match_type = self._first_matching_rule(pair)
        if match_type is None:
            return None

        logger.debug(
            "Pair %s/%s scored %s",
            pair.transaction.id,
            pair.fuel_log.id,
            match_type.value,
        )
        return ScoredMatch(pair=pair, match_type=match_type, confidence=RuleConfidence.for_type(match_type))

    def score_all(self, pairs: list[CandidatePair]) -> list[ScoredMatch]:
        """Score every pair, dropping those no rule accepts."""
        scored = []
        for pair in pairs:
            result = self.score(pair)
            if result is not None:
                scored.append(result)
        return scored

    def _first_matching_rule(self, pair: CandidatePair) -> MatchType | None:
        transaction = pair.transaction
        fuel_log = pair.fuel_log
        same_day = transaction.date == fuel_log.date

        if same_day and self._amounts_agree(pair):
            return MatchType.DATE_COST

        if same_day and self._quantities_agree(pair):
            return MatchType.DATE_QUANTITY

        if (
            pair.days_apart <= self.date_tolerance_days
            and supplier_names_match(transaction.supplier_name, fuel_log.supplier_name)
            and states_match(transaction.supplier_state, fuel_log.supplier_state)
        ):
            return MatchType.DATE_SUPPLIER_STATE

        return None

    @staticmethod
    def _amounts_agree(pair: CandidatePair) -> bool:
        difference = abs(pair.transaction.amount_value - pair.fuel_log.amount_value)
        return difference < AMOUNT_TOLERANCE

    @staticmethod
    def _quantities_agree(pair: CandidatePair) -> bool:
        first = pair.transaction.quantity
        second = pair.fuel_log.quantity
        if first is None or second is None:
            return False
        return abs(first - second) < QUANTITY_TOLERANCE
