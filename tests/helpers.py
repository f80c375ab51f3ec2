import time
from datetime import datetime, timedelta, timezone

from jose import jwt

from app.shared.outcomes import SideEffectResult

TEST_SECRET = "test-secret"

# 12:00 in the salon timezone
NOW = datetime(2025, 6, 1, 3, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingNotifier:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def notify(self, reservation_id, event):
        self.sent.append((reservation_id, event))
        if self.fail:
            return SideEffectResult.failed("notification", "function unavailable")
        return SideEffectResult.succeeded("notification")

    @property
    def events(self):
        return [event for _, event in self.sent]


def make_token(user_id, email, user_type=None, **metadata):
    claims = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    if user_type:
        claims["user_metadata"] = {"user_type": user_type, **metadata}
    return jwt.encode(claims, TEST_SECRET, algorithm="HS256")


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def listing_payload(**overrides):
    payload = {
        "title": "Cut model wanted",
        "description": "Cut and blow for our junior stylists",
        "menus": ["cut"],
        "gender_requirement": "female",
        "available_dates": [
            {"datetime": "2025-06-05T10:00:00+09:00"},
            {"datetime": "2025-06-04T15:00:00+09:00"},
        ],
    }
    payload.update(overrides)
    return payload
