"""
Error taxonomy for owner order actions.

Every failure raised by the order services is an OrderActionError carrying an
ErrorKind. Callers branch on `kind` instead of catching a family of classes;
the HTTP layer maps kinds to status codes and the bulk processor records the
kind's value per failed order.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "NotFound"
    FORBIDDEN = "Forbidden"
    INVALID_TRANSITION = "InvalidTransition"
    CONFLICT = "Conflict"
    EXTERNAL_SERVICE_FAILURE = "ExternalServiceFailure"
    VALIDATION_ERROR = "ValidationError"
    INTERNAL = "InternalError"


HTTP_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INVALID_TRANSITION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.EXTERNAL_SERVICE_FAILURE: 502,
    ErrorKind.INTERNAL: 500,
}


class OrderActionError(Exception):
    """Raised when an owner action on an order cannot be carried out."""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or kind.value
        super().__init__(self.message)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def __repr__(self):
        return f"OrderActionError({self.kind.value}, {self.message!r})"

    # Shorthand constructors used throughout the services
    @classmethod
    def not_found(cls, message):
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def forbidden(cls, message):
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def invalid_transition(cls, message):
        return cls(ErrorKind.INVALID_TRANSITION, message)

    @classmethod
    def conflict(cls, message):
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def validation(cls, message):
        return cls(ErrorKind.VALIDATION_ERROR, message)


@dataclass
class ActionOutcome:
    """
    Tagged result of a single action: either ok with a value, or failed with
    an error kind and message.
    """

    ok: bool
    value: Any = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, value=None):
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str):
        return cls(ok=False, error_kind=kind, message=message)

    @classmethod
    def capture(cls, func: Callable[[], Any]) -> "ActionOutcome":
        """
        Runs `func` and folds any exception into a failed outcome.
        Unexpected exceptions become INTERNAL and are logged with traceback.
        """
        try:
            return cls.success(func())
        except OrderActionError as e:
            return cls.failure(e.kind, e.message)
        except Exception as e:
            logger.error(f"Unexpected error while processing action: {e}", exc_info=True)
            return cls.failure(ErrorKind.INTERNAL, str(e) or e.__class__.__name__)

    def unwrap(self):
        if self.ok:
            return self.value
        raise OrderActionError(self.error_kind, self.message)
