"""Reviewer module for checking planned walls."""

from .enclosure_check import (
    EnclosureCheckResult,
    EnclosureResult,
    check_enclosure,
)

__all__ = [
    "EnclosureCheckResult",
    "EnclosureResult",
    "check_enclosure",
]
