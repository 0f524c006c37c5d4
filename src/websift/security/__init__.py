"""
Input validation for WebSift's outer surfaces.
"""

from .validation import URLValidationError, URLValidationRules, URLValidator, describe_url, parse_url, validate_url

__all__ = [
    "URLValidationError",
    "URLValidationRules",
    "URLValidator",
    "describe_url",
    "parse_url",
    "validate_url",
]
