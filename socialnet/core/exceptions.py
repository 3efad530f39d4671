"""Domain exceptions for SocialNet.

Services raise these instead of ``HTTPException``. Each class carries the
HTTP status that ``socialnet.main`` answers with.
"""


class SocialNetError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    default_detail = "Unexpected error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(SocialNetError):
    """Malformed or missing input that passed schema validation."""

    status_code = 400
    default_detail = "Invalid input"


class NotFoundError(SocialNetError):
    """Referenced entity does not exist."""

    status_code = 404
    default_detail = "Resource not found"


class UnauthorizedError(SocialNetError):
    """Caller identity is missing or invalid."""

    status_code = 401
    default_detail = "Could not validate credentials"


class ForbiddenError(SocialNetError):
    """Caller is authenticated but not entitled to the target resource."""

    status_code = 403
    default_detail = "Not enough permissions"


class ConflictError(SocialNetError):
    """Uniqueness violation."""

    status_code = 409
    default_detail = "Resource already exists"


class UpstreamError(SocialNetError):
    """Media store or another external collaborator failed."""

    status_code = 502
    default_detail = "Upstream service failure"


__all__ = [
    "SocialNetError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "UpstreamError",
]
