"""
Typed Exception Hierarchy for the Inventory Valuation Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Valuation errors fall into classes that callers must treat differently:
a bad query window is the caller's fault and maps to a client error, while
an unparseable row from the event store is an operator problem that no
caller can correct.  Parsing messages to tell them apart is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        summary = service.compute_financial_summary_wac(start, end, scope)
    except InvalidRangeError as e:
        return api_error(400, code=e.code, start=e.start, end=e.end)
    except ComputationFailedError as e:
        log.error("wac failed", extra={"entity_id": e.entity_id})
        return api_error(500, code=e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidRangeError
    |   +-- MissingWindowBoundError
    |   +-- InvalidWindowDateError
    |
    +-- DataFormatError
    |   +-- MalformedNumericError
    |   +-- MalformedTimestampError
    |   +-- UnknownReasonError
    |   +-- NegativeUnitCostError
    |   +-- ValueOutOfRangeError
    |
    +-- ComputationFailedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                  | When Raised
-------------|-----------------------|------------------------------------------
Validation   | INVALID_RANGE         | Window start is after window end
             | MISSING_WINDOW_BOUND  | Window start or end not supplied
             | INVALID_WINDOW_DATE   | Window bound is not a date / ISO date
-------------|-----------------------|------------------------------------------
Data format  | MALFORMED_NUMERIC     | Quantity or cost cannot be read as a number
             | MALFORMED_TIMESTAMP   | Event timestamp cannot be read
             | UNKNOWN_REASON        | Reason tag outside the reason catalog
             | NEGATIVE_UNIT_COST    | Cost-establishing event carries cost < 0
             | VALUE_OUT_OF_RANGE    | Quantity or cost outside the range the
             |                       | decimal context can value exactly
-------------|-----------------------|------------------------------------------
Computation  | COMPUTATION_FAILED    | A data format error hit during replay,
             |                       | wrapped with the offending event's context

===============================================================================
HANDLING PATTERNS
===============================================================================

ValidationError is raised before any event is read and is never retried.
DataFormatError is raised by the numeric normalizer; the replay engine
never lets it escape bare, it re-raises it as ComputationFailedError
(``raise ... from exc``) so the original raw value stays reachable through
``__cause__`` as well as through the wrapper's attributes.

Nothing in this hierarchy is retried internally: replay is deterministic
over its input snapshot, so a retry would reproduce the same failure.
"""

from typing import Any


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Window validation exceptions


class ValidationError(InventoryKernelError):
    """Base exception for client-input errors on the query window."""

    code: str = "VALIDATION_ERROR"


class InvalidRangeError(ValidationError):
    """Window start is after window end."""

    code: str = "INVALID_RANGE"

    def __init__(self, start: Any, end: Any):
        self.start = start
        self.end = end
        super().__init__(f"start must be on or before end: start={start}, end={end}")


class MissingWindowBoundError(ValidationError):
    """Window start or end was not supplied."""

    code: str = "MISSING_WINDOW_BOUND"

    def __init__(self, bound: str):
        self.bound = bound
        super().__init__(f"Window bound must be provided: {bound}")


class InvalidWindowDateError(ValidationError):
    """Window bound is neither a date nor an ISO-format date string."""

    code: str = "INVALID_WINDOW_DATE"

    def __init__(self, bound: str, raw_value: Any):
        self.bound = bound
        self.raw_value = raw_value
        super().__init__(f"Window {bound} is not a valid date: {raw_value!r}")


# Event source data format exceptions


class DataFormatError(InventoryKernelError):
    """
    Base exception for values from the event source that cannot be
    normalized into canonical types.

    Every subclass records the field being read and the offending raw value.
    """

    code: str = "DATA_FORMAT_ERROR"

    def __init__(self, field: str, raw_value: Any, message: str):
        self.field = field
        self.raw_value = raw_value
        super().__init__(message)


class MalformedNumericError(DataFormatError):
    """Quantity or cost is not a usable number."""

    code: str = "MALFORMED_NUMERIC"

    def __init__(self, field: str, raw_value: Any, expected: str = "number"):
        self.expected = expected
        super().__init__(
            field,
            raw_value,
            f"Malformed {expected} for {field}: {raw_value!r} "
            f"({type(raw_value).__name__})",
        )


class MalformedTimestampError(DataFormatError):
    """Event timestamp is not a recognized timestamp representation."""

    code: str = "MALFORMED_TIMESTAMP"

    def __init__(self, field: str, raw_value: Any):
        super().__init__(
            field,
            raw_value,
            f"Malformed timestamp for {field}: {raw_value!r} "
            f"({type(raw_value).__name__})",
        )


class UnknownReasonError(DataFormatError):
    """Reason tag is not part of the stock change reason catalog."""

    code: str = "UNKNOWN_REASON"

    def __init__(self, field: str, raw_value: Any):
        super().__init__(field, raw_value, f"Unknown stock change reason: {raw_value!r}")


class NegativeUnitCostError(DataFormatError):
    """A cost-establishing event carries a negative unit cost."""

    code: str = "NEGATIVE_UNIT_COST"

    def __init__(self, field: str, raw_value: Any):
        super().__init__(field, raw_value, f"Unit cost cannot be negative: {raw_value!r}")


class ValueOutOfRangeError(DataFormatError):
    """
    Quantity or cost is a finite number too large to value.

    Raised by the normalizer for quantities outside the signed 64-bit range
    and costs of 1e19 or more, and by the replay when running totals no
    longer fit the decimal precision at the required places.
    """

    code: str = "VALUE_OUT_OF_RANGE"

    def __init__(self, field: str, raw_value: Any, limit: str):
        self.limit = limit
        super().__init__(
            field,
            raw_value,
            f"Value out of range for {field}: {raw_value!r} (limit: {limit})",
        )


# Replay exceptions


class ComputationFailedError(InventoryKernelError):
    """
    Replay aborted on an event whose data could not be normalized or valued.

    Wraps the underlying DataFormatError with the identifying fields of the
    offending event. Raw values are kept as they came from the source,
    since the event may not have been parseable far enough to normalize them.
    """

    code: str = "COMPUTATION_FAILED"

    def __init__(
        self,
        cause: DataFormatError,
        *,
        sequence: int,
        entity_id: Any = None,
        scope_id: Any = None,
        timestamp: Any = None,
        reason: Any = None,
    ):
        self.cause_code = cause.code
        self.field = cause.field
        self.raw_value = cause.raw_value
        self.sequence = sequence
        self.entity_id = entity_id
        self.scope_id = scope_id
        self.timestamp = timestamp
        self.reason = reason
        super().__init__(
            f"WAC computation failed at event #{sequence} "
            f"(entity={entity_id}, scope={scope_id}, timestamp={timestamp}, "
            f"reason={reason}): {cause}"
        )
