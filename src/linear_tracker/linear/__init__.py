"""Linear API integration package."""

from .client import (
    DEFAULT_API_URL,
    LinearAuthError,
    LinearClient,
    LinearClientError,
    LinearForbiddenError,
    LinearMutationError,
    LinearNotFoundError,
    LinearRateLimitError,
)

__all__ = [
    "DEFAULT_API_URL",
    "LinearAuthError",
    "LinearClient",
    "LinearClientError",
    "LinearForbiddenError",
    "LinearMutationError",
    "LinearNotFoundError",
    "LinearRateLimitError",
]
