#!/usr/bin/env python3
"""
Matching Domain Models

Type-safe models flowing through the reconciliation pipeline:

    ComparisonRecord -> CandidatePair -> ScoredMatch -> Match

plus the read-side structures returned by the query facade.
"""

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from ..core.dates import FinancialDate
from ..core.money import Money


class RecordKind(Enum):
    """Which card network a comparison record came from."""

    TRANSACTION = "transaction"
    FUEL_LOG = "fuel_log"


class MatchType(Enum):
    """Heuristic rule that produced a match, strongest evidence first."""

    DATE_COST = "date_cost"
    DATE_QUANTITY = "date_quantity"
    DATE_SUPPLIER_STATE = "date_supplier_state"


class MatchState(Enum):
    """Lifecycle of a match. Superseded matches never become active again."""

    PROPOSED = "proposed"
    ACTIVE = "active"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class ComparisonRecord:
    """
    Canonical view of a transaction or fuel log for matching.

    Transactions and fuel logs are adapted into this one shape at the
    boundary (see ``normalizer``); nothing downstream looks at raw rows.
    """

    id: str
    kind: RecordKind
    driver_id: str | None
    date: FinancialDate
    amount: Money
    quantity: Decimal | None = None
    supplier_name: str | None = None
    supplier_state: str | None = None
    # Amount as read from the row, before rounding to cents
    exact_amount: Decimal | None = None

    @property
    def amount_value(self) -> Decimal:
        return self.exact_amount if self.exact_amount is not None else self.amount.to_decimal()


@dataclass(frozen=True)
class CandidatePair:
    """A transaction and fuel log close enough in time to be worth scoring."""

    transaction: ComparisonRecord
    fuel_log: ComparisonRecord

    @property
    def days_apart(self) -> int:
        return self.transaction.date.days_between(self.fuel_log.date)


@dataclass(frozen=True)
class ScoredMatch:
    """Candidate pair that satisfied one of the scoring rules."""

    pair: CandidatePair
    match_type: MatchType
    confidence: float

    @property
    def transaction_id(self) -> str:
        return self.pair.transaction.id

    @property
    def fuel_log_id(self) -> str:
        return self.pair.fuel_log.id


@dataclass(frozen=True)
class Match:
    """
    One transaction asserted to be the same purchase as one fuel log.

    ``id`` is only set once the match has been persisted.
    """

    transaction_id: str
    fuel_log_id: str
    match_type: MatchType
    confidence: float
    id: str | None = None
    state: MatchState = MatchState.PROPOSED

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be between 0.0 and 1.0, got {self.confidence}")

    @classmethod
    def from_scored(cls, scored: ScoredMatch) -> "Match":
        return cls(
            transaction_id=scored.transaction_id,
            fuel_log_id=scored.fuel_log_id,
            match_type=scored.match_type,
            confidence=scored.confidence,
        )

    @property
    def key(self) -> tuple[str, str, str, float]:
        """Content identity used to recognise an unchanged match on re-save."""
        return (self.transaction_id, self.fuel_log_id, self.match_type.value, round(self.confidence, 2))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "fuel_log_id": self.fuel_log_id,
            "match_type": self.match_type.value,
            "confidence": self.confidence,
            "state": self.state.value,
        }


@dataclass
class ActiveMatches:
    """Active match set for one driver, with fast membership lookups."""

    matches: list[Match]
    matched_transaction_ids: set[str] = field(default_factory=set)
    matched_fuel_log_ids: set[str] = field(default_factory=set)

    @classmethod
    def from_matches(cls, matches: list[Match]) -> "ActiveMatches":
        return cls(
            matches=matches,
            matched_transaction_ids={m.transaction_id for m in matches},
            matched_fuel_log_ids={m.fuel_log_id for m in matches},
        )


@dataclass
class MatchStatistics:
    """Summary numbers derived from an active match set (never stored)."""

    total_matches: int
    matched_transactions: int
    matched_fuel_logs: int
    average_confidence: float
    match_type_breakdown: dict[str, int]

    @classmethod
    def from_active(cls, active: ActiveMatches) -> "MatchStatistics":
        matches = active.matches
        average = sum(m.confidence for m in matches) / len(matches) if matches else 0.0
        breakdown = Counter(m.match_type.value for m in matches)

        return cls(
            total_matches=len(matches),
            matched_transactions=len(active.matched_transaction_ids),
            matched_fuel_logs=len(active.matched_fuel_log_ids),
            average_confidence=round(average, 3),
            match_type_breakdown=dict(sorted(breakdown.items())),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_matches": self.total_matches,
            "matched_transactions": self.matched_transactions,
            "matched_fuel_logs": self.matched_fuel_logs,
            "average_confidence": self.average_confidence,
            "match_type_breakdown": self.match_type_breakdown,
        }


@dataclass
class ReconciliationReport:
    """
    Matched and unmatched records for one driver over one window.

    This is what report-detail views render: matched pairs side by side,
    then whatever is left on either card.
    """

    driver_id: str
    window_label: str
    matches: list[Match]
    unmatched_transactions: list[ComparisonRecord]
    unmatched_fuel_logs: list[ComparisonRecord]
    skipped_records: list[str] = field(default_factory=list)

    @property
    def statistics(self) -> MatchStatistics:
        return MatchStatistics.from_active(ActiveMatches.from_matches(self.matches))
