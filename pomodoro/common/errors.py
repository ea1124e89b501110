"""Timer lifecycle errors."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Error kind, for callers that map failures onto their own protocol."""

    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    FAILED_PRECONDITION = "failed_precondition"
    INTERNAL = "internal"


class TimerError(Exception):
    """Base class for timer lifecycle failures."""

    kind: ErrorKind = ErrorKind.INTERNAL


class InvalidIdentifierError(TimerError, ValueError):
    """No usable timer identifier was given."""

    kind = ErrorKind.INVALID_ARGUMENT


class TimerNotFoundError(TimerError, LookupError):
    """No live timer is associated with the identifier."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, identifier: str, reason: str = "no timer associated with identifier"):
        """Remember which identifier was looked up."""
        super().__init__(f"{reason}: {identifier}")
        self.identifier = identifier


class TimerStateError(TimerError):
    """The timer exists but is in the wrong state for the operation."""

    kind = ErrorKind.FAILED_PRECONDITION


class TimerInternalError(TimerError, RuntimeError):
    """Unexpected failure inside the time keeper."""

    kind = ErrorKind.INTERNAL


class DurationParseError(TimerInternalError, ValueError):
    """A pomodoro duration could not be turned into a positive timedelta."""
