"""Error taxonomy for reconciliation runs."""


class MatchingError(Exception):
    """Base class for all reconciliation failures."""


class NormalizationError(MatchingError):
    """A single row could not be turned into a comparison record."""

    def __init__(self, record_id: str | None, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Cannot normalize record {record_id or '<unknown>'}: {reason}")


class CandidateGenerationError(MatchingError):
    """The matching window or tolerance makes the run meaningless."""


class DriverNotFoundError(MatchingError):
    """A matching run was requested for a driver that does not exist."""

    def __init__(self, driver_id: str):
        self.driver_id = driver_id
        super().__init__(f"Driver not found: {driver_id}")


class PersistenceError(MatchingError):
    """
    Saving a match set failed and was rolled back.

    ``retryable`` is set when the failure came from a concurrent writer
    (lock timeout or a lost race on the active-match unique indexes), in
    which case recomputing from fresh data and saving again is safe.
    """

    def __init__(self, message: str, retryable: bool = False):
        self.retryable = retryable
        super().__init__(message)
