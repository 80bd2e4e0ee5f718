"""
Domain exceptions raised by services and mapped to HTTP errors by the API.
"""


class NotFoundError(Exception):
    """Raised when a referenced entity does not exist."""

    pass


class SchedulingConflictError(Exception):
    """Raised when a session would double-book a room or a teacher.

    Attributes:
        resource: "room" or "teacher"
        start_at: start instant (UTC) of the first conflicting slot
    """

    def __init__(self, message: str, *, resource: str, start_at: object) -> None:
        super().__init__(message)
        self.resource = resource
        self.start_at = start_at
