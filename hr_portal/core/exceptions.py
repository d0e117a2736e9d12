"""Domain errors raised by the service layer.

Routers never catch these; ``main.create_app`` registers one handler per
class that turns them into JSON responses.
"""

from typing import Any, Dict, List, Optional


class PortalError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message}


class ValidationError(PortalError):
    """Input is well-formed but violates a business rule."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "fields": self.fields}


class ConflictError(PortalError):
    """Proposed period overlaps existing settings in a way that needs a human."""

    status_code = 409

    def __init__(self, message: str, conflicts: List[Dict[str, Any]]):
        super().__init__(message)
        self.conflicts = conflicts

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "conflicts": self.conflicts}


class NotFoundError(PortalError):
    status_code = 404


class IllegalStateError(PortalError):
    """Operation is not allowed for the record in its current state."""
