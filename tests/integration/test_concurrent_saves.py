#!/usr/bin/env python3
"""
Integration tests for two writers saving matches for the same driver.

These run on a file-backed SQLite database so each session gets its own
connection. A cursor listener commits a competing save right after the first
writer has read the active set, which is the window the partial unique
indexes have to guard.
"""

import pytest
from sqlalchemy import event

from fuelrec.matching.errors import PersistenceError
from fuelrec.matching.models import Match, MatchType
from fuelrec.matching.scorer import RuleConfidence
from fuelrec.matching.service import MatchingService
from fuelrec.store.database import Database, build_engine
from fuelrec.store.match_store import MatchStore
from tests.fixtures.records import RecordFactory


@pytest.fixture
def file_database(tmp_path):
    db = Database(build_engine(f"sqlite:///{tmp_path / 'race.db'}"))
    db.create_schema()
    yield db
    db.engine.dispose()


@pytest.fixture
def purchase(file_database):
    """One driver with a transaction and fuel log that match on date and cost."""
    records = RecordFactory(file_database)
    driver_id = records.driver()
    transaction_id = records.transaction(driver_id, "2024-07-03", "52.10")
    fuel_log_id = records.fuel_log(driver_id, "2024-07-03", "52.10")
    return driver_id, transaction_id, fuel_log_id


class CompetingSave:
    """Commits another writer's save once, right after the active set is read."""

    def __init__(self, database, driver_id, match):
        self.database = database
        self.driver_id = driver_id
        self.match = match
        self.saved = None
        self.armed = True

    def __call__(self, conn, cursor, statement, parameters, context, executemany):
        if not self.armed or not statement.lstrip().upper().startswith("SELECT") or "FROM matches" not in statement:
            return
        self.armed = False
        self.saved = MatchStore(self.database).save_matches(self.driver_id, [self.match])

    def __enter__(self):
        event.listen(self.database.engine, "after_cursor_execute", self)
        return self

    def __exit__(self, *exc_info):
        event.remove(self.database.engine, "after_cursor_execute", self)


def _date_cost_match(transaction_id, fuel_log_id):
    return Match(transaction_id, fuel_log_id, MatchType.DATE_COST, RuleConfidence.for_type(MatchType.DATE_COST))


@pytest.mark.integration
@pytest.mark.store
class TestConcurrentSaves:
    """Test the losing writer of a race is rejected and can recover."""

    def test_losing_save_is_retryable(self, file_database, purchase):
        """Test the second insert of the same pair fails retryably and leaves one active row."""
        driver_id, transaction_id, fuel_log_id = purchase
        match = _date_cost_match(transaction_id, fuel_log_id)
        store = MatchStore(file_database)

        with CompetingSave(file_database, driver_id, match) as competitor:
            with pytest.raises(PersistenceError) as exc_info:
                store.save_matches(driver_id, [match])

        assert not competitor.armed
        assert exc_info.value.retryable

        active = store.get_active_matches_for_driver(driver_id)
        assert [m.id for m in active.matches] == [competitor.saved[0].id]
        assert len(store.get_match_history(driver_id)) == 1

    def test_service_converges_after_retry(self, file_database, purchase):
        """Test a matching run that loses the race recomputes and keeps the winner's row."""
        driver_id, transaction_id, fuel_log_id = purchase
        service = MatchingService(file_database, date_tolerance_days=3, max_attempts=3)

        with CompetingSave(file_database, driver_id, _date_cost_match(transaction_id, fuel_log_id)) as competitor:
            saved = service.find_matches_for_driver(driver_id)

        assert not competitor.armed
        assert [m.id for m in saved] == [competitor.saved[0].id]

        active = service.get_active_matches_for_driver(driver_id)
        assert len(active.matches) == 1
        assert active.matched_transaction_ids == {transaction_id}
        assert active.matched_fuel_log_ids == {fuel_log_id}
