"""Error hints for configuration validation errors.

Provides user-friendly hints with actionable remediation steps
for common validation errors in diversification configuration files.
"""

from typing import Final


# Mapping of error types to user-friendly hints
ERROR_HINTS: Final[dict[str, str]] = {
    # Missing / unknown field errors
    "missing": "This field is required. Please add it to your configuration.",
    "extra_forbidden": "Unknown field. Check the spelling against the documented keys.",
    # Type errors
    "enum": "Check the allowed values in the documentation.",
    "int_type": "This field must be an integer (whole number).",
    "float_type": "This field must be a number.",
    "bool_type": "This field must be true or false.",
    "list_type": "This field must be a list/array.",
    "dict_type": "This field must be an object/mapping.",
    # Value constraint errors
    "greater_than": "The value is too small. It must be strictly positive.",
    "greater_than_equal": "The value is too small. Check the minimum allowed.",
    "less_than_equal": "The value is too large. Check the maximum allowed.",
    "string_pattern_mismatch": "The format is invalid. Use a version like '1.0'.",
    "value_error": "The combination of values is invalid. See the message for details.",
    # File errors
    "file_not_found": "The file does not exist. Check the file path.",
    "yaml_parse_error": "Invalid YAML syntax. Check for proper indentation and formatting.",
}

# Field-specific hints for more context
FIELD_HINTS: Final[dict[str, str]] = {
    "default_quotas": "fresh + familiar + discovery must not exceed 1.10 and no quota may be negative.",
    "quota_override": "fresh + familiar + discovery must not exceed 1.10 and no quota may be negative.",
    "dimension_weights": "Weights must be non-negative and sum to at most 1.0.",
    "risk_thresholds": "Thresholds must ascend: MODERATE <= HIGH <= CRITICAL.",
    "recency_decay_rate": "Hourly decay rate, strictly positive (default 0.05).",
    "replacement_score_ratio": "Must be between 0.0 and 1.0 (default 0.8).",
    "max_history_size": "Number of history entries to request, 0 or more.",
}


def get_error_hint(error_type: str, field_name: str | None = None) -> str:
    """Get a user-friendly hint for a validation error.

    Args:
        error_type: The Pydantic error type (e.g., 'missing', 'enum').
        field_name: Optional field path for field-specific hints.

    Returns:
        A user-friendly hint string.
    """
    if field_name:
        # Walk the path from the innermost segment outwards
        for segment in reversed(field_name.split(".")):
            if segment in FIELD_HINTS:
                return FIELD_HINTS[segment]

    return ERROR_HINTS.get(
        error_type, "Check the configuration documentation for valid values."
    )


def format_validation_error(
    location: str,
    message: str,
    error_type: str,
    *,
    include_hint: bool = True,
) -> str:
    """Format a validation error with optional hint.

    Args:
        location: The error location (e.g., 'balancing.default_quotas').
        message: The original error message.
        error_type: The error type.
        include_hint: Whether to include a hint.

    Returns:
        Formatted error string.
    """
    base = f"{location}: {message}"
    if include_hint:
        hint = get_error_hint(error_type, location)
        return f"{base}\n    Hint: {hint}"
    return base
