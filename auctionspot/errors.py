"""
Errors raised by the auction operations.

Each carries the HTTP status the API answers with; the app renders them as
``{"detail": message}``.
"""

from __future__ import annotations


class AuctionError(Exception):
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(AuctionError):
    status_code = 404


class RuleViolation(AuctionError):
    """Budget exceeded, bid below minimum, auction not live and the like."""


class Unauthorized(AuctionError):
    status_code = 401


class Forbidden(AuctionError):
    status_code = 403
