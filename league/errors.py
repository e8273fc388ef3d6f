"""Domain exceptions raised by the engine layer.

Each carries the HTTP status it maps to; routers translate them with
``league.api.to_http``. Nothing here depends on FastAPI.
"""


class LeagueError(Exception):
    """Base class for all league domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LeagueError, ValueError):
    """Malformed or inconsistent input. No state was changed."""

    status_code = 400


class UnknownEventType(ValidationError):
    def __init__(self, event_type):
        super().__init__(f"Unknown event type: {event_type}")
        self.event_type = event_type


class DerivationEmptyError(ValidationError):
    """A game event that derives zero scoring events."""

    def __init__(self, message: str = "No scoring events could be derived from this game event"):
        super().__init__(message)


class ConflictError(LeagueError):
    """Concurrent or out-of-order mutation (draft turn, double pick)."""

    status_code = 409


class NotFoundError(LeagueError):
    status_code = 404


class PermissionDeniedError(LeagueError):
    status_code = 403
