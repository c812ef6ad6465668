#!/usr/bin/env python3
"""
Match Store

Persists resolved match sets and answers read queries about them.

A save replaces a driver's active set in one database transaction:
1. lock the driver row so saves for the same driver run one at a time
2. supersede active rows that are not part of the new set
3. leave identical active rows alone, so their ids stay the same
4. insert the remaining new matches

Any failure rolls the whole transaction back, leaving the previous active
set exactly as it was.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from ..matching.errors import DriverNotFoundError, PersistenceError
from ..matching.models import ActiveMatches, Match, MatchState, MatchStatistics, MatchType
from .database import Database
from .schema import Driver, MatchRow

logger = logging.getLogger(__name__)


def _row_key(row: MatchRow) -> tuple[str, str, str, float]:
    return (row.transaction_id, row.fuel_log_id, row.match_type, round(float(row.confidence), 2))


def _to_match(row: MatchRow) -> Match:
    return Match(
        id=row.id,
        transaction_id=row.transaction_id,
        fuel_log_id=row.fuel_log_id,
        match_type=MatchType(row.match_type),
        confidence=float(row.confidence),
        state=MatchState.ACTIVE if row.is_active else MatchState.SUPERSEDED,
    )


@dataclass(frozen=True)
class MatchScope:
    """Ids of the transactions and fuel logs a windowed run considered."""

    transaction_ids: frozenset[str]
    fuel_log_ids: frozenset[str]

    def touches(self, transaction_id: str, fuel_log_id: str) -> bool:
        return transaction_id in self.transaction_ids or fuel_log_id in self.fuel_log_ids


# SQLite names the column, server databases name the index
_ACTIVE_MATCH_CONFLICT_MARKERS = ("uq_matches_active_", "UNIQUE constraint failed: matches.")


def _is_active_match_conflict(error: IntegrityError) -> bool:
    """True when another writer already holds one of the records in an active match."""
    message = str(error.orig)
    return any(marker in message for marker in _ACTIVE_MATCH_CONFLICT_MARKERS)


def _check_exclusive(matches: list[Match]) -> None:
    seen_transactions: set[str] = set()
    seen_fuel_logs: set[str] = set()
    for match in matches:
        if match.transaction_id in seen_transactions:
            raise PersistenceError(f"Transaction {match.transaction_id} appears in more than one match")
        if match.fuel_log_id in seen_fuel_logs:
            raise PersistenceError(f"Fuel log {match.fuel_log_id} appears in more than one match")
        seen_transactions.add(match.transaction_id)
        seen_fuel_logs.add(match.fuel_log_id)


class MatchStore:
    """Relational persistence for matches."""

    def __init__(self, database: Database):
        self.database = database

    def save_matches(
        self, driver_id: str, matches: list[Match], scope: MatchScope | None = None
    ) -> list[Match]:
        """
        Atomically replace the driver's active matches with ``matches``.

        Args:
            driver_id: Driver whose match set is replaced
            matches: New conflict-free match set
            scope: Records the run looked at. When given, only active matches
                touching one of these records are replaced; matches entirely
                outside the scope (other quarters) are left active.

        Returns:
            The persisted matches (with ids), in input order

        Raises:
            DriverNotFoundError: If the driver does not exist
            PersistenceError: If the save failed; nothing was changed
        """
        unique: dict[tuple, Match] = {}
        for match in matches:
            unique.setdefault(match.key, match)
        wanted = list(unique.values())
        _check_exclusive(wanted)

        try:
            with self.database.session_scope() as session:
                driver = session.scalars(select(Driver).where(Driver.id == driver_id).with_for_update()).first()
                if driver is None:
                    raise DriverNotFoundError(driver_id)

                existing = session.scalars(
                    select(MatchRow).where(MatchRow.driver_id == driver_id, MatchRow.is_active.is_(True))
                ).all()
                if scope is not None:
                    existing = [row for row in existing if scope.touches(row.transaction_id, row.fuel_log_id)]

                wanted_keys = {m.key for m in wanted}
                kept = {_row_key(row): row for row in existing if _row_key(row) in wanted_keys}
                stale_ids = [row.id for row in existing if _row_key(row) not in wanted_keys]

                if stale_ids:
                    session.execute(
                        update(MatchRow)
                        .where(MatchRow.id.in_(stale_ids))
                        .values(is_active=False, superseded_at=datetime.now())
                    )

                rows: list[MatchRow] = []
                for match in wanted:
                    row = kept.get(match.key)
                    if row is None:
                        row = MatchRow(
                            driver_id=driver_id,
                            transaction_id=match.transaction_id,
                            fuel_log_id=match.fuel_log_id,
                            match_type=match.match_type.value,
                            confidence=round(match.confidence, 2),
                            is_active=True,
                        )
                        session.add(row)
                    rows.append(row)

                session.flush()
                saved = [_to_match(row) for row in rows]

        except (DriverNotFoundError, PersistenceError):
            raise
        except OperationalError as e:
            logger.warning("Saving matches for driver %s hit a lock conflict: %s", driver_id, e)
            raise PersistenceError(f"Database busy while saving matches for driver {driver_id}", retryable=True) from e
        except IntegrityError as e:
            if _is_active_match_conflict(e):
                logger.warning("Saving matches for driver %s lost a race to another writer: %s", driver_id, e.orig)
                raise PersistenceError(
                    f"Concurrent match save for driver {driver_id}; recompute and retry", retryable=True
                ) from e
            logger.error("Saving matches for driver %s violated a constraint: %s", driver_id, e.orig)
            raise PersistenceError(f"Constraint violation while saving matches for driver {driver_id}: {e.orig}") from e
        except SQLAlchemyError as e:
            logger.error("Saving matches for driver %s failed: %s", driver_id, e)
            raise PersistenceError(f"Failed to save matches for driver {driver_id}: {e}") from e

        logger.info(
            "Saved %d active matches for driver %s (%d kept, %d superseded)",
            len(saved),
            driver_id,
            len(kept),
            len(stale_ids),
        )
        return saved

    def get_active_matches_for_driver(self, driver_id: str) -> ActiveMatches:
        """Active matches for the driver plus matched id sets."""
        with self.database.session_scope() as session:
            rows = session.scalars(
                select(MatchRow)
                .where(MatchRow.driver_id == driver_id, MatchRow.is_active.is_(True))
                .order_by(MatchRow.transaction_id, MatchRow.fuel_log_id)
            ).all()
            matches = [_to_match(row) for row in rows]
        return ActiveMatches.from_matches(matches)

    def get_match_history(self, driver_id: str) -> list[Match]:
        """Every match ever saved for the driver, active and superseded."""
        with self.database.session_scope() as session:
            rows = session.scalars(
                select(MatchRow).where(MatchRow.driver_id == driver_id).order_by(MatchRow.created_at, MatchRow.id)
            ).all()
            return [_to_match(row) for row in rows]

    def get_statistics(self, driver_id: str) -> MatchStatistics:
        return MatchStatistics.from_active(self.get_active_matches_for_driver(driver_id))
