"""
Service-level errors.

Services raise these; the handlers registered in ``estatehub.main`` turn them
into ``{"success": false, "message": ...}`` responses with the matching status.
"""

from fastapi import status


class EstateHubError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server Error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(EstateHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class NotAuthorizedError(EstateHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class ForbiddenError(EstateHubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class ValidationError(EstateHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"


def describe_validation_errors(errors) -> str:
    """Flatten pydantic error dicts into one readable message."""
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = loc[-1] if loc else ""
        msg = err.get("msg", "Invalid value")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Validation error"
