"""
Validation utilities for user data and message content.
"""
from typing import Tuple


def validate_password(password: str) -> Tuple[bool, str]:
    """
    Validate password strength.

    Args:
        password: Password to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password:
        return False, "Password is required"

    if len(password) < 6:
        return False, "Password must be at least 6 characters long"

    return True, ""


def validate_message_content(content: object, max_length: int) -> Tuple[bool, str]:
    """
    Validate chat content: a non-blank string of at most max_length characters.

    Args:
        content: Raw content as received from the client
        max_length: Upper bound on the content length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(content, str) or not content.strip():
        return False, "Message content is required"

    if len(content) > max_length:
        return False, f"Message cannot exceed {max_length} characters"

    return True, ""


def preview(content: str, length: int) -> str:
    """Cut content to its first `length` characters, marking the cut with '...'."""
    if len(content) > length:
        return content[:length] + "..."
    return content
