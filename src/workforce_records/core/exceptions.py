class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"
    retryable = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class MissingFieldError(ValidationError):
    """A required input is absent or blank."""

    code = "MISSING_FIELD"

    def __init__(self, *fields: str):
        self.fields = tuple(fields)
        super().__init__(f"Missing required field(s): {', '.join(fields)}")


class InvalidRangeError(ValidationError):
    code = "INVALID_RANGE"


class InvalidLeaveTypeError(ValidationError):
    code = "INVALID_LEAVE_TYPE"


class MissingCommentError(ValidationError):
    code = "MISSING_COMMENT"


class AlreadyProcessedError(ValidationError):
    code = "ALREADY_PROCESSED"


class AttendanceStateError(ValidationError):
    """Attendance state machine violation; re-fetch today's record before retrying."""

    code = "ATTENDANCE_STATE"


class AlreadyCheckedInError(AttendanceStateError):
    code = "ALREADY_CHECKED_IN"


class AlreadyCheckedOutError(AttendanceStateError):
    code = "ALREADY_CHECKED_OUT"


class NotCheckedInError(AttendanceStateError):
    code = "NOT_CHECKED_IN"


class NotFoundError(DomainError):
    code = "NOT_FOUND"


class AuthenticationError(DomainError):
    """Raised when the upstream caller context is missing or malformed."""

    code = "UNAUTHENTICATED"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"


class StorageConflictError(DomainError):
    """A concurrent write lost a race on the same row. Re-issuing the operation resolves it."""

    code = "STORAGE_CONFLICT"
    retryable = True
