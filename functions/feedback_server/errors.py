"""
Exceptions raised by the feedback services and mapped to HTTP responses.
"""

from __future__ import annotations


class FeedbackServerError(Exception):
    """Base class for errors rendered as ``{"success": false, "message": ...}``."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(FeedbackServerError):
    """Missing, unknown or expired admin credentials."""

    status_code = 401


class InvalidCredential(Unauthorized):
    def __init__(self, message: str = "Invalid password"):
        super().__init__(message)


class InvalidRequest(FeedbackServerError):
    """Request body or parameters that cannot be decoded."""

    def __init__(self, message: str = "Invalid request body"):
        super().__init__(message)
