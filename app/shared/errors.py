"""Translation of backend error messages into user-facing text"""

from typing import Optional

# Known substrings (lowercase) and the message shown instead
FRIENDLY_MESSAGES: list[tuple[str, str]] = [
    ("already booked", "This time slot has just been booked by someone else. Please choose another slot."),
    ("listing not found or closed", "This listing is no longer accepting reservations."),
    ("invalid requested instant", "The requested date and time cannot be reserved."),
    ("invalid login credentials", "Incorrect email address or password."),
    ("email not confirmed", "Please confirm your email address before signing in."),
    ("user already registered", "This email address is already registered."),
    ("duplicate key", "This record already exists."),
    ("unique constraint", "This record already exists."),
    ("foreign key", "This record is still referenced by other data."),
]

DEFAULT_ERROR_MESSAGE = "Something went wrong. Please try again."


def friendly_error_message(raw: Optional[str]) -> str:
    """
    Map a raw backend message to friendlier text.

    Unknown messages are returned verbatim so nothing is hidden from the user.
    """
    if not raw:
        return DEFAULT_ERROR_MESSAGE
    lowered = raw.lower()
    for needle, message in FRIENDLY_MESSAGES:
        if needle in lowered:
            return message
    return raw
