"""
Authorization and Retry-After header handling.
"""

from typing import Mapping


AUTHORIZATION_HEADER = "authorization"
RETRY_AFTER_HEADER = "retry-after"
BEARER_PREFIX = "Bearer "

# Used when a 429 response carries no usable Retry-After
DEFAULT_RETRY_AFTER_SECONDS = 5


def build_auth_headers(token: str) -> dict[str, str]:
    """
    Build the headers sent with every signed outbound request.

    Examples:
        >>> build_auth_headers("1700000000.ab12")
        {'Content-Type': 'application/json', 'Authorization': 'Bearer 1700000000.ab12'}
    """
    return {
        "Content-Type": "application/json",
        "Authorization": f"{BEARER_PREFIX}{token}",
    }


def extract_bearer_token(headers: Mapping[str, str]) -> str | None:
    """
    Extract the token from an Authorization: Bearer header.

    Header names are matched case-insensitively.

    Args:
        headers: Request headers

    Returns:
        The token string, or None if the header is missing, does not use the
        Bearer scheme, or carries an empty token

    Examples:
        >>> extract_bearer_token({"Authorization": "Bearer 123.abc"})
        '123.abc'
        >>> extract_bearer_token({"authorization": "Basic dXNlcg=="}) is None
        True
    """
    value = None
    for key, header_value in headers.items():
        if key.lower() == AUTHORIZATION_HEADER:
            value = header_value
            break

    if not value or not value.startswith(BEARER_PREFIX):
        return None

    token = value[len(BEARER_PREFIX):].strip()
    return token or None


def parse_retry_after(
    value: str | None,
    default: int = DEFAULT_RETRY_AFTER_SECONDS,
) -> int:
    """
    Parse a Retry-After value given in whole seconds.

    HTTP-date values and anything else that is not a non-negative integer
    fall back to the default.

    Examples:
        >>> parse_retry_after("2")
        2
        >>> parse_retry_after(None)
        5
    """
    if value is None:
        return default
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return default
    return int(value)
