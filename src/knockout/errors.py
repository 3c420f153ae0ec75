"""Exception classes for bracket and session errors."""


class KnockoutError(Exception):
    """Base error class.

    Every error carries the HTTP status the web layer answers with.
    """

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class BracketError(KnockoutError):
    """Raised for misuse of the bracket engine."""


class InvalidInput(BracketError):
    """Raised when a bracket cannot be built from the given participants."""


class OutOfSequence(BracketError):
    """Raised when a round is advanced before it is finished, or twice."""

    def __init__(self, message):
        super().__init__(message, 409)


class StructuralImpossibility(BracketError):
    """Raised when a bye would join a round the bracket does not have."""

    def __init__(self, message):
        super().__init__(message, 500)


class InvalidOutcome(BracketError):
    """Raised when a contest result names someone outside the contest."""


class SessionError(KnockoutError):
    """Base class for tournament session errors."""


class SessionNotFound(SessionError):
    def __init__(self, message="Tournament not found."):
        super().__init__(message, 404)


class SessionExists(SessionError):
    def __init__(self, message="A tournament is already running here."):
        super().__init__(message, 409)


class PermissionDenied(SessionError):
    def __init__(self, message="Only the organizer can do that."):
        super().__init__(message, 403)


class InvalidState(SessionError):
    """Raised when an action does not fit the tournament's current stage."""

    def __init__(self, message):
        super().__init__(message, 409)


class RollRejected(SessionError):
    """Raised when a participant may not draw right now."""
