"""Shared validation utilities"""

import re
from typing import Optional
from urllib.parse import urlparse

# School-issued addresses end in .ac.jp
SCHOOL_EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.ac\.jp$"
INSTAGRAM_URL_PATTERN = r"^https?://(www\.)?instagram\.com/[a-zA-Z0-9._]+/?$"
# Japanese numbers with or without hyphens
JP_PHONE_PATTERN = r"^0\d{9,10}$|^0\d{1,4}-\d{1,4}-\d{4}$"


def is_school_email(email: Optional[str]) -> bool:
    """True when the address was issued by a school (*.ac.jp)"""
    if not email:
        return False
    return re.match(SCHOOL_EMAIL_PATTERN, email.strip()) is not None


def validate_instagram_url(url: Optional[str]) -> Optional[str]:
    """
    Validate an Instagram profile URL.

    Raises:
        ValueError: If the URL is not an instagram.com profile link
    """
    if not url:
        return url

    url = url.strip()
    if not re.match(INSTAGRAM_URL_PATTERN, url):
        raise ValueError("Instagram URL must look like https://instagram.com/<username>")
    return url


def validate_jp_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a Japanese phone number (0XXXXXXXXX or 0X-XXXX-XXXX).

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    phone = phone.strip()
    if not re.match(JP_PHONE_PATTERN, phone):
        raise ValueError("Phone number must be a Japanese number, e.g. 03-1234-5678")
    return phone


def validate_url(url: Optional[str]) -> Optional[str]:
    """Validate an absolute http(s) URL"""
    if not url:
        return url

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid URL")
    return url.strip()
