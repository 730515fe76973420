"""Domain error taxonomy shared by all services"""

from typing import Any, Optional


class HosteedError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_content(self) -> dict:
        return {"detail": self.message}


class ValidationError(HosteedError):
    """Malformed or out-of-range input (bad dates, negative counts, rates outside [0,1])"""

    status_code = 400


class ForbiddenError(HosteedError):
    status_code = 403


class NotFoundError(HosteedError):
    """Referenced property, extra, commission rule or promotion does not exist"""

    status_code = 404


class ConflictError(HosteedError):
    """
    Availability or promotion overlap.

    `conflicts` holds the serialized conflicting entities so the caller can
    retry with other dates or force-confirm (promotions only).
    """

    status_code = 409

    def __init__(self, message: str, conflicts: Optional[list[dict[str, Any]]] = None, **extra):
        super().__init__(message)
        self.conflicts = conflicts or []
        self.extra = extra

    def to_content(self) -> dict:
        content = {"detail": self.message, "conflicts": self.conflicts}
        content.update(self.extra)
        return content


class InternalError(HosteedError):
    """Backing-store failure; the transaction has been rolled back"""

    status_code = 500
