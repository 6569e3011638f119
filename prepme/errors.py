from __future__ import annotations

"""Error taxonomy shared by the store, the scheduler and the test session."""


class PrepMeError(Exception):
    """Base class for all PrepMe errors."""


class NoProblemsAvailable(PrepMeError):
    """A test was started against an empty problem pool."""

    def __init__(self, message: str = "No problems available for test!") -> None:
        super().__init__(message)


class PersistenceUnavailable(PrepMeError):
    """A store read or write failed (missing directory, I/O error, undecodable JSON)."""

    def __init__(self, path: object, reason: object = None) -> None:
        self.path = path
        self.reason = reason
        msg = f"Persistence unavailable for {path}"
        if reason is not None:
            msg += f": {reason}"
        super().__init__(msg)


class MalformedRecord(PrepMeError):
    """A stored document is not a usable problem or test-result record."""


class InvalidTransition(PrepMeError):
    """A test-session operation was invoked in a state that does not accept it."""

    def __init__(self, operation: str, state: object) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while session is in state '{state}'")
