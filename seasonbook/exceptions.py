"""Custom exceptions for the season engine.

Custom exceptions let callers tell apart the failures the engine can hit:

1. Broken invariants: an operation would leave an athlete in an invalid state
   (for example two active seasons), so it is refused before anything changes.
2. Caller contract violations: folding the same game into the cumulative
   statistics twice.
3. Missing rows: an id that does not exist in the database.

None of these is fatal to the process. The engine prefers self-healing
(consistency repair, idempotent re-runs) and only refuses the single operation.

Soft conditions are not raised at all. A record dated exactly on a half-year
boundary (MigrationAmbiguityWarning) or a drifted forward/back reference
(ReferenceDriftWarning) is resolved deterministically and logged; the warning
classes exist so log records can be tagged and filtered by category.

Usage Examples:
- raise InvariantViolationError(f"Season {season.id} belongs to athlete {season.athlete_id}")
- raise SeasonNotFoundError(f"Season {season_id} not found")
"""


class SeasonbookError(Exception):
    """Base exception for season engine errors."""


class InvariantViolationError(SeasonbookError, ValueError):
    """Raised when an operation would break a season invariant.

    Common Scenarios:
    - Activating a season that belongs to a different athlete
    - Reactivating a season that is already active
    - Reassigning records to a season of another athlete on delete
    - Creating a season with a blank name

    The operation is rejected before any change is flushed, so the
    "at most one active season per athlete" invariant still holds.
    """


class DuplicateAggregationError(SeasonbookError):
    """Raised when a game is claimed for aggregation a second time.

    Folding a game into the cumulative statistics must happen exactly once,
    when the game ends. `fold_game_into_cumulative` itself does not check;
    the game lifecycle claims the game first and treats this error as
    "already counted".
    """


class SeasonNotFoundError(SeasonbookError, LookupError):
    """Raised when a season id does not exist."""


class AthleteNotFoundError(SeasonbookError, LookupError):
    """Raised when an athlete id does not exist."""


class MigrationCancelledError(SeasonbookError):
    """Raised when a season migration is cancelled between buckets.

    Everything committed before the cancellation stays valid: each bucket is
    committed as one transaction, and at most one season is active. A later
    run picks up the remaining unlinked records.
    """


class MigrationAmbiguityWarning(UserWarning):
    """Log category for records dated on a half-year boundary."""


class ReferenceDriftWarning(UserWarning):
    """Log category for forward/back reference drift found by repair."""
