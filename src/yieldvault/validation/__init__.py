"""Validation and invariant checks for vault state."""

from .invariants import (
    InvariantChecker,
    ValidationWarning,
    check_transition,
    errors_only,
    solvency_gap,
)

__all__ = [
    "InvariantChecker",
    "ValidationWarning",
    "check_transition",
    "errors_only",
    "solvency_gap",
]
