"""Custom exceptions for dynquery.

The codec and the query builder never raise on their documented inputs:
malformed query strings are degraded, not rejected. These exceptions are
raised by the layers around them (typed field conversion, configuration,
in-memory evaluation).
"""

from typing import Any, Dict


class DynQueryError(Exception):
    """Base exception for all dynquery errors.

    Attributes:
        message: Error message
        details: Additional error context as key-value pairs
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        self.message = message
        self.details: Dict[str, Any] = kwargs
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.details:
            return self.message

        details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        if self.message:
            return f"{self.message} ({details_str})"
        return details_str

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# Validation exceptions
class ValidationError(DynQueryError):
    """Raised when a typed filter value or field definition is invalid.

    Example:
        >>> raise ValidationError("Invalid filter value", field="age")
    """


class MissingFieldError(ValidationError):
    """Raised when a field definition lacks a required attribute.

    Example:
        >>> raise MissingFieldError("Enum field requires enum_values", field="status")
    """


class InvalidFieldError(ValidationError):
    """Raised when a value cannot be converted to or from its wire string.

    Example:
        >>> raise InvalidFieldError("Not an integer", field="age", value="abc", expected="int")
    """


# Configuration exceptions
class ConfigurationError(DynQueryError):
    """Raised when configuration is invalid."""


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is out of range.

    Example:
        >>> raise InvalidConfigError("Invalid config value", config_key="DEFAULT_PAGE_SIZE", value=0, expected=">0")
    """


# Evaluation exceptions
class EvaluationError(DynQueryError):
    """Raised when the in-memory evaluator cannot apply a criterion.

    Example:
        >>> raise EvaluationError("Criterion has no values", key="age", operation="GREATER_THAN")
    """
