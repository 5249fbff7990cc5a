"""Form validation package."""

from autoshop.validation.validator import FormValidator, parse_decimal, parse_int

__all__ = ["FormValidator", "parse_decimal", "parse_int"]
