"""
domain.exceptions - Custom exception hierarchy for the trainer marketplace.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed.
"""


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class ValidationError(DomainError):
    """Raised when input is malformed or empty."""


class InvalidStateTransition(DomainError):
    """Raised when a hire-request precondition is violated."""


class NotFound(DomainError):
    """Raised when a referenced user, request or record does not exist."""


class Forbidden(DomainError):
    """Raised when the caller is not allowed to see or act on a resource."""


class UpstreamFailure(DomainError):
    """Raised when the durable store or the auth provider fails."""


class AuthenticationError(DomainError):
    """Raised when authentication fails (bad credentials, expired token)."""


class DuplicateLoginError(DomainError):
    """Raised when attempting to register with an e-mail that already exists."""
