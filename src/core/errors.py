"""
Domain error taxonomy.

ValidationError is raised before any Data Store call and is always
recoverable by the user. TransportError, NotFoundError and ConflictError
come from (or on behalf of) the Data Store.
"""


class ValidationCodes:
    """Validation error code constants."""

    INVALID_ORDER = "InvalidOrder"
    TOO_SHORT = "TooShort"
    TOO_LONG = "TooLong"
    NOT_CANCELLABLE = "NotCancellable"
    ILLEGAL_TRANSITION = "IllegalTransition"
    READ_ONLY = "ReadOnly"
    NOT_PERMITTED = "NotPermitted"


class ValidationError(Exception):
    """Booking input or transition rejected locally."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self):
        return f"ValidationError({self.code!r}, {self.message!r})"


class TransportError(Exception):
    """Network, auth or non-2xx failure talking to the Data Store."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(TransportError):
    """Requested record no longer exists in the Data Store."""

    def __init__(self, message: str = "Record not found"):
        super().__init__(message, status_code=404)


class ConflictError(Exception):
    """Record changed in the Data Store since the editor loaded it."""

    def __init__(self, kind: str, record_id: int, expected: int | None, actual: int | None):
        super().__init__(
            f"{kind} {record_id} was modified by another session "
            f"(expected version {expected}, found {actual})"
        )
        self.kind = kind
        self.record_id = record_id
        self.expected = expected
        self.actual = actual
