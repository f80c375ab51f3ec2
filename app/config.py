import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./salon_model_match.db")

# Managed backend (auth provider + edge functions)
BACKEND_URL = os.getenv("BACKEND_URL", "").rstrip("/")
BACKEND_ANON_KEY = os.getenv("BACKEND_ANON_KEY")

# Access tokens issued by the auth provider are HS256 JWTs signed with this secret
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")
if not AUTH_JWT_SECRET:
    import warnings

    warnings.warn(
        "AUTH_JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    AUTH_JWT_SECRET = "INSECURE-DEV-SECRET-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated")

# Reservation notification function (fire-and-forget)
NOTIFICATION_FUNCTION_URL = os.getenv(
    "NOTIFICATION_FUNCTION_URL",
    f"{BACKEND_URL}/functions/v1/reservation-notification" if BACKEND_URL else "",
)
NOTIFICATION_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "10"))

# Comma-separated allow-list of admin email addresses
ADMIN_EMAILS = [
    email.strip().lower() for email in os.getenv("ADMIN_EMAILS", "").split(",") if email.strip()
]

# Frontend base URL
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Salons operate in a single fixed offset (JST)
SALON_UTC_OFFSET_HOURS = int(os.getenv("SALON_UTC_OFFSET_HOURS", "9"))

# Direct booking and student cancellation close this many hours before the slot
BOOKING_WINDOW_HOURS = int(os.getenv("BOOKING_WINDOW_HOURS", "48"))

# Deployment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

# CORS origins (comma-separated)
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")
    if origin.strip()
]
