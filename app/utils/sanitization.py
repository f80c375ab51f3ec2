import html
import re
from typing import Optional

from fastapi import HTTPException


def sanitize_optional_text(value: Optional[str], max_length: int = 2000) -> Optional[str]:
    """Sanitize free text, mapping blank input to None."""
    if value is None or not value.strip():
        return None
    return validate_and_sanitize_input(value, max_length=max_length)


def validate_and_sanitize_input(value: str, max_length: int = 500) -> str:
    """
    Validate and sanitize user input by removing potentially harmful content.

    Args:
        value: Input string to validate
        max_length: Maximum allowed length

    Returns:
        Sanitized string

    Raises:
        ValueError: If input is invalid
    """
    if not value:
        return ""

    value = str(value).strip()

    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    value = html.escape(value, quote=True)

    value = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", value)

    return value


def sanitize_request_text(value: Optional[str], max_length: int = 2000) -> Optional[str]:
    """sanitize_optional_text for request handlers: overlong input becomes a 400."""
    try:
        return sanitize_optional_text(value, max_length=max_length)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
