"""
Matching Package

The reconciliation pipeline, as pure functions over in-memory records:

    normalize -> generate_candidates -> MatchScorer -> resolve

``MatchingService`` (in ``fuelrec.matching.service``) wires the pipeline to
the store; it is not re-exported here because the store depends on this
package's models.
"""

from .candidates import DEFAULT_DATE_TOLERANCE_DAYS, generate_candidates, validate_window
from .errors import (
    CandidateGenerationError,
    DriverNotFoundError,
    MatchingError,
    NormalizationError,
    PersistenceError,
)
from .models import (
    ActiveMatches,
    CandidatePair,
    ComparisonRecord,
    Match,
    MatchState,
    MatchStatistics,
    MatchType,
    ReconciliationReport,
    RecordKind,
    ScoredMatch,
)
from .normalizer import normalize, normalize_batch, normalize_fuel_log, normalize_transaction
from .resolver import resolve
from .scorer import MatchScorer, RuleConfidence

__all__ = [
    # Errors
    "CandidateGenerationError",
    "DriverNotFoundError",
    "MatchingError",
    "NormalizationError",
    "PersistenceError",
    # Models
    "ActiveMatches",
    "CandidatePair",
    "ComparisonRecord",
    "Match",
    "MatchState",
    "MatchStatistics",
    "MatchType",
    "RecordKind",
    "ReconciliationReport",
    "ScoredMatch",
    # Pipeline
    "DEFAULT_DATE_TOLERANCE_DAYS",
    "MatchScorer",
    "RuleConfidence",
    "generate_candidates",
    "normalize",
    "normalize_batch",
    "normalize_fuel_log",
    "normalize_transaction",
    "resolve",
    "validate_window",
]
