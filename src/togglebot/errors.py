from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INDEX_NOT_FOUND = "INDEX_NOT_FOUND"
    INDEX_STALE = "INDEX_STALE"
    INDEX_CORRUPT = "INDEX_CORRUPT"
    INDEX_READ_FAILED = "INDEX_READ_FAILED"
    INDEX_WRITE_FAILED = "INDEX_WRITE_FAILED"
    INDEX_FORMAT_INVALID = "INDEX_FORMAT_INVALID"
    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"
    CRATE_NOT_FOUND = "CRATE_NOT_FOUND"
    FETCH_FAILED = "FETCH_FAILED"
    URL_NOT_ALLOWED = "URL_NOT_ALLOWED"


class DocSearchError(Exception):
    """Raised by the doc search components for all infrastructure conditions.

    The resolver handles the cache-miss codes (``INDEX_NOT_FOUND``,
    ``INDEX_STALE``) and ``CRATE_NOT_FOUND`` itself. Every other code
    propagates out of ``DocResolver.find`` to the command handler, which
    logs it and replies with a generic apology.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }


class InvalidPathError(ValueError):
    """A query could not be parsed into an item path.

    The message is meant for the end user: it says why the path is invalid.
    """
