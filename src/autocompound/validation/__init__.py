"""Validation and sanity checks for the auto-compounder."""

from .sanity_checks import SanityChecker, ValidationWarning, exact_average_efficiency, validate_engine_ledger

__all__ = [
    "SanityChecker",
    "ValidationWarning",
    "exact_average_efficiency",
    "validate_engine_ledger",
]
