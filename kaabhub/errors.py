"""
kaabhub.errors — Domain Exceptions
===================================

Services raise these; :mod:`kaabhub.api.main` maps each to its HTTP status
and a ``{"message": ...}`` body.
"""

from __future__ import annotations


class KaabError(Exception):
    """Base class for every error the API reports to the caller."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(KaabError):
    """Malformed or missing input."""

    status_code = 400


class AuthenticationError(KaabError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class AuthorizationError(KaabError):
    """The acting user does not own the resource."""

    status_code = 403


class NotFoundError(KaabError):
    status_code = 404
