"""
Validation and error handling for the rtmetrics package.

This module provides input validation, the domain exception types and
error handling with consistent error reporting across the application.
"""

from .exceptions import (
    CollectionError,
    ErrorSeverity,
    PerfParseError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_file_error,
)

from .error_handler import (
    AsyncErrorContext,
    AsyncErrorHandler,
    AsyncErrorType,
)

from .validators import (
    require_non_negative_int,
    require_number,
    require_string,
    validate_boolean,
    validate_optional_string,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Exceptions and handlers
    "CollectionError",
    "ErrorSeverity",
    "PerfParseError",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "handle_file_error",
    # Async handling
    "AsyncErrorContext",
    "AsyncErrorHandler",
    "AsyncErrorType",
    # Validators
    "require_non_negative_int",
    "require_number",
    "require_string",
    "validate_boolean",
    "validate_optional_string",
    "validate_positive_float",
    "validate_positive_integer",
]
