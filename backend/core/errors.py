"""
Client-facing error taxonomy. Services raise these; main.py maps them to the
``{success: false, error}`` envelope with the matching status code.
"""

from __future__ import annotations


class AppError(Exception):
    """Base for errors that are reported to the client as-is."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(AppError):
    """Missing or malformed input (400)."""

    status_code = 400


class Forbidden(AppError):
    """Caller is not allowed to perform the mutation (403)."""

    status_code = 403


class NotFound(AppError):
    """Referenced record or parent record does not exist (404)."""

    status_code = 404
