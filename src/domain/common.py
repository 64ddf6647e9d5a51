"""Shared error types for interpreting upstream log documents."""

from __future__ import annotations


class MalformedLogError(ValueError):
    """Raised when a log document lacks a field the extractor cannot default."""


__all__ = ["MalformedLogError"]
