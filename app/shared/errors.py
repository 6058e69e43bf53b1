"""Domain exceptions shared across services

Services raise these; app.main maps them to HTTP responses.
"""


class DemoSlotError(Exception):
    """Base class for domain errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DemoSlotError):
    """Missing or malformed required input"""

    status_code = 400


class NotFoundError(DemoSlotError):
    """Referenced member, event or slot does not exist"""

    status_code = 404


class AuthorizationError(DemoSlotError):
    """Caller is not allowed to act on the slot"""

    status_code = 403


class NotificationError(DemoSlotError):
    """Best-effort email delivery failed; logged, never returned to the booking caller"""
