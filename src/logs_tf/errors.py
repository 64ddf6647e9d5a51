"""Errors raised while querying logs.tf."""

from __future__ import annotations


class LogsTfError(Exception):
    """Any failure to get a usable answer from logs.tf."""


class LogsTfTransportError(LogsTfError):
    """The connection failed, timed out, or logs.tf answered with an HTTP error."""


class LogsTfDecodeError(LogsTfError):
    """logs.tf answered with something that is not the expected JSON document."""


class LogsTfRejectedError(LogsTfError):
    """logs.tf answered `"success": false` with an error message."""

    def __init__(self, message: str) -> None:
        super().__init__(f"logs.tf could not successfully complete the query: {message}")
        self.message = message


__all__ = [
    "LogsTfDecodeError",
    "LogsTfError",
    "LogsTfRejectedError",
    "LogsTfTransportError",
]
