#!/usr/bin/env python3
"""
Matching Service

Entry points used by the upload path and the CLI. A run loads a driver's
rows, pushes them through normalize -> candidates -> score -> resolve and
hands the result to the match store.

Example:
    >>> service = MatchingService(Database.from_config())
    >>> matches = service.find_matches_for_driver(driver_id, QuarterWindow.from_quarter_string("2024-Q3"))
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..core.config import get_config
from ..core.quarters import QuarterWindow
from ..store.database import Database
from ..store.match_store import MatchScope, MatchStore
from ..store.queries import get_driver, load_fuel_logs_for_driver, load_transactions_for_driver
from .candidates import generate_candidates, validate_window
from .errors import DriverNotFoundError, MatchingError, PersistenceError
from .models import ActiveMatches, Match, MatchStatistics, RecordKind, ReconciliationReport
from .normalizer import normalize_batch
from .resolver import resolve
from .scorer import MatchScorer

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Output of one in-memory pass over a driver's records."""

    matches: list[Match]
    transaction_ids: frozenset[str]
    fuel_log_ids: frozenset[str]
    skipped_records: list[str] = field(default_factory=list)


def run_pipeline(
    transaction_rows: Iterable[Any],
    fuel_log_rows: Iterable[Any],
    window: QuarterWindow | None = None,
    date_tolerance_days: int = 3,
) -> PipelineResult:
    """
    Match raw rows without touching the database.

    Rows that cannot be normalized are skipped and reported in
    ``skipped_records``; the rest of the batch is still matched.
    """
    transaction_rows = list(transaction_rows)
    fuel_log_rows = list(fuel_log_rows)

    transactions, tx_warnings = normalize_batch(transaction_rows, RecordKind.TRANSACTION)
    fuel_logs, fl_warnings = normalize_batch(fuel_log_rows, RecordKind.FUEL_LOG)

    pairs = generate_candidates(transactions, fuel_logs, window, date_tolerance_days)
    scored = MatchScorer(date_tolerance_days).score_all(pairs)
    matches = resolve(scored)

    return PipelineResult(
        matches=matches,
        transaction_ids=frozenset(str(row_id) for row_id in _ids(transaction_rows)),
        fuel_log_ids=frozenset(str(row_id) for row_id in _ids(fuel_log_rows)),
        skipped_records=tx_warnings + fl_warnings,
    )


def _ids(rows: list[Any]) -> list[Any]:
    ids = []
    for row in rows:
        row_id = row.get("id") if isinstance(row, Mapping) else getattr(row, "id", None)
        if row_id is not None:
            ids.append(row_id)
    return ids


class MatchingService:
    """Reconciliation runs and read queries for one database."""

    def __init__(
        self,
        database: Database,
        store: MatchStore | None = None,
        date_tolerance_days: int | None = None,
        max_attempts: int | None = None,
    ):
        self.database = database
        self.store = store or MatchStore(database)

        if date_tolerance_days is None or max_attempts is None:
            matching_config = get_config().matching
            if date_tolerance_days is None:
                date_tolerance_days = matching_config.date_tolerance_days
            if max_attempts is None:
                max_attempts = matching_config.max_attempts

        self.date_tolerance_days = date_tolerance_days
        self.max_attempts = max(1, max_attempts)

    def _compute(self, driver_id: str, window: QuarterWindow | None) -> PipelineResult:
        try:
            with self.database.session_scope() as session:
                if get_driver(session, driver_id) is None:
                    raise DriverNotFoundError(driver_id)
                transaction_rows = load_transactions_for_driver(session, driver_id, window)
                fuel_log_rows = load_fuel_logs_for_driver(session, driver_id, window)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load records for driver {driver_id}: {e}") from e

        return run_pipeline(transaction_rows, fuel_log_rows, window, self.date_tolerance_days)

    def find_matches_for_driver(self, driver_id: str, window: QuarterWindow | None = None) -> list[Match]:
        """
        Recompute and persist the driver's matches.

        Without a window every stored record of the driver takes part and the
        whole active set is replaced. With a window only active matches that
        touch a record inside the window are replaced.

        Raises:
            DriverNotFoundError: If the driver does not exist
            CandidateGenerationError: If the window is inverted
            PersistenceError: If saving failed after all attempts
        """
        validate_window(window)

        for attempt in range(1, self.max_attempts + 1):
            result = self._compute(driver_id, window)
            scope = None
            if window is not None:
                scope = MatchScope(result.transaction_ids, result.fuel_log_ids)

            try:
                saved = self.store.save_matches(driver_id, result.matches, scope)
            except PersistenceError as e:
                if not e.retryable or attempt == self.max_attempts:
                    raise
                logger.warning(
                    "Match save for driver %s conflicted (attempt %d/%d), recomputing",
                    driver_id,
                    attempt,
                    self.max_attempts,
                )
                continue

            logger.info(
                "Matched %d pairs for driver %s over %s (%d records skipped)",
                len(saved),
                driver_id,
                window or "all dates",
                len(result.skipped_records),
            )
            return saved

        # Loop always returns or raises
        raise PersistenceError(f"Failed to save matches for driver {driver_id}")

    def get_active_matches_for_driver(self, driver_id: str) -> ActiveMatches:
        return self.store.get_active_matches_for_driver(driver_id)

    def get_statistics(self, driver_id: str) -> MatchStatistics:
        return self.store.get_statistics(driver_id)

    def get_reconciliation_report(
        self, driver_id: str, window: QuarterWindow | None = None
    ) -> ReconciliationReport:
        """
        Matched pairs plus the records left unmatched on either card.

        Only active matches touching a record inside the window are listed.
        """
        validate_window(window)

        with self.database.session_scope() as session:
            if get_driver(session, driver_id) is None:
                raise DriverNotFoundError(driver_id)
            transaction_rows = load_transactions_for_driver(session, driver_id, window)
            fuel_log_rows = load_fuel_logs_for_driver(session, driver_id, window)

        transactions, tx_warnings = normalize_batch(transaction_rows, RecordKind.TRANSACTION)
        fuel_logs, fl_warnings = normalize_batch(fuel_log_rows, RecordKind.FUEL_LOG)

        active = self.store.get_active_matches_for_driver(driver_id)
        transaction_ids = {r.id for r in transaction_rows}
        fuel_log_ids = {r.id for r in fuel_log_rows}
        matches = [
            m for m in active.matches if m.transaction_id in transaction_ids or m.fuel_log_id in fuel_log_ids
        ]

        return ReconciliationReport(
            driver_id=driver_id,
            window_label=str(window) if window is not None else "all dates",
            matches=matches,
            unmatched_transactions=[t for t in transactions if t.id not in active.matched_transaction_ids],
            unmatched_fuel_logs=[f for f in fuel_logs if f.id not in active.matched_fuel_log_ids],
            skipped_records=tx_warnings + fl_warnings,
        )

    def process_upload_matching(
        self, upload_type: str, driver_id: str, window: QuarterWindow | None = None
    ) -> list[Match] | None:
        """
        Run matching after an upload without ever failing the upload.

        Returns:
            The saved matches, or None if matching failed (the error is logged)
        """
        logger.info("Running matching for driver %s after %s upload", driver_id, upload_type)
        try:
            return self.find_matches_for_driver(driver_id, window)
        except MatchingError as e:
            logger.error("Matching after %s upload failed for driver %s: %s", upload_type, driver_id, e)
            return None
