"""
Error taxonomy for the dropout tracker.

- ValidationError: raw student metrics outside their declared bounds, or a
  missing required field. Always names the offending field.
- AggregationError: a listing/report call with an unknown sort key, tier,
  direction, or an invalid page. Raised immediately, never defaulted.
- StoreError: the record store failed to persist or read records.
"""


class DropoutTrackerError(Exception):
    """Base class for all errors raised by the application core."""


class ValidationError(DropoutTrackerError):
    """Raw input rejected before it reaches the risk model."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class AggregationError(DropoutTrackerError):
    """Invalid arguments passed to a report aggregation function."""


class StoreError(DropoutTrackerError):
    """Persistence failure in the student record store.

    ``message`` is the client-facing summary of the failed operation and
    ``detail`` carries the underlying database error text.
    """

    def __init__(self, message: str, detail: str = ""):
        super().__init__(f"{message}: {detail}" if detail else message)
        self.message = message
        self.detail = detail
