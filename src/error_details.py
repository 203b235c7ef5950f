"""Error message formatting for user-friendly exception handling."""

import requests
from pydantic import ValidationError

from src.reporting.errors import ReportingError


def _format_http_error(error: requests.HTTPError) -> str:
    """Format Chef Infra Server HTTP errors."""
    response = error.response
    if response is None:
        return f"Chef Infra Server error: {error}"

    if response.status_code == 401:
        return (
            "Chef Infra Server rejected the request signature.\n"
            "Check the client name, client key and system clock.\n"
            f"Details: {error}"
        )
    if response.status_code == 403:
        return (
            "Chef Infra Server access denied.\n"
            "Check the permissions of the API client.\n"
            f"Details: {error}"
        )
    return f"Chef Infra Server error ({response.status_code}): {error}"


ERROR_TYPES = {
    ReportingError: lambda e: f"{e.kind.value} error: {e}",
    requests.HTTPError: _format_http_error,
    requests.ConnectionError: lambda e: (
        f"Unable to connect to the Chef Infra Server.\nDetails: {e}"
    ),
    requests.Timeout: lambda e: f"Chef Infra Server request timed out: {e}",
    ValidationError: lambda e: f"Invalid configuration:\n{e}",
    RuntimeError: lambda e: str(e),
    FileNotFoundError: lambda e: str(e),
    ValueError: lambda e: str(e),
    PermissionError: lambda e: f"Permission denied: {e!s}\nCheck file permissions.",
    OSError: lambda e: f"System error: {e!s}",
}


def get_error_human_message(error: Exception) -> str:
    """
    Get user-friendly error message based on exception type.

    Args:
        error: The exception to format

    Returns:
        Formatted error message suitable for end users
    """
    for error_type, handler in ERROR_TYPES.items():
        if isinstance(error, error_type):
            return handler(error)
    return str(error)
