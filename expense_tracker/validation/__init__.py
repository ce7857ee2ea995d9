"""Input validation package."""

from expense_tracker.validation.validator import InputValidator, ValidationError

__all__ = ["InputValidator", "ValidationError"]
