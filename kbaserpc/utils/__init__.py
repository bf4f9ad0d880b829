"""Utility functions for kbaserpc."""

from kbaserpc.utils.exceptions import (
    KBaseRpcError,
    ErrorCategory,
    classify_exception,
    format_error,
    sanitize_error_message,
)

__all__ = [
    "KBaseRpcError",
    "ErrorCategory",
    "classify_exception",
    "format_error",
    "sanitize_error_message",
]
