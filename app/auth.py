import logging
from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import ADMIN_EMAILS, AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET
from .database import get_db
from .domain.accounts.repository import AccountRepository
from .models import Salon, Student

logger = logging.getLogger(__name__)

security = HTTPBearer()


@dataclass
class Account:
    """The signed-in principal together with its role-specific profile"""

    id: str
    email: str
    user_type: str  # student, salon
    profile: Union[Student, Salon]

    @property
    def is_student(self) -> bool:
        return self.user_type == "student"

    @property
    def is_salon(self) -> bool:
        return self.user_type == "salon"

    @property
    def is_admin(self) -> bool:
        return is_admin_email(self.email)


def is_admin_email(email: Optional[str]) -> bool:
    if not email:
        return False
    if not ADMIN_EMAILS:
        logger.warning("⚠️ ADMIN_EMAILS is not set; the admin area is inaccessible")
        return False
    return email.strip().lower() in ADMIN_EMAILS


def verify_access_token(token: str) -> dict:
    """Verify an access token issued by the auth provider and return its claims"""
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(status_code=401, detail="Invalid token format. Expected a valid JWT token.")

    try:
        claims = jwt.decode(
            token,
            AUTH_JWT_SECRET,
            algorithms=["HS256"],
            audience=AUTH_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.error(f"❌ Token verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e

    if not claims.get("sub"):
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return claims


def resolve_account(db: Session, claims: dict) -> Account:
    """
    Resolve the profile for an authenticated principal.

    Looks for a student profile first, then a salon profile. When neither
    exists (the signup trigger did not run), the profile is provisioned from
    the signup metadata carried in the token.
    """
    user_id = claims["sub"]
    email = (claims.get("email") or "").lower()
    repo = AccountRepository()

    student = repo.get_student(db, user_id)
    if student:
        return Account(id=user_id, email=email or student.email, user_type="student", profile=student)

    salon = repo.get_salon(db, user_id)
    if salon:
        return Account(id=user_id, email=email or salon.email, user_type="salon", profile=salon)

    metadata = claims.get("user_metadata") or {}
    user_type = metadata.get("user_type")
    if user_type not in ("student", "salon") or not email:
        logger.error(f"❌ No profile found for user {user_id} and no usable signup metadata")
        raise HTTPException(status_code=403, detail="User profile not found")

    logger.info(f"🆕 Provisioning missing {user_type} profile for {email}")
    try:
        if user_type == "student":
            profile = repo.provision_student(db, user_id, email, metadata)
        else:
            profile = repo.provision_salon(db, user_id, email, metadata)
    except ValueError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    except IntegrityError as e:
        db.rollback()
        logger.error(f"❌ Failed to provision profile for {email}: {str(e)}")
        raise HTTPException(
            status_code=409, detail="This email is already registered with another account."
        ) from e

    logger.info(f"✅ Profile provisioned for {email}")
    return Account(id=user_id, email=email, user_type=user_type, profile=profile)


def authenticate_token(token: Optional[str], db: Session) -> Account:
    """Authenticate a raw token (used by WebSocket endpoints)"""
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return resolve_account(db, verify_access_token(token))


async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Account:
    """Get the current account from the bearer token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    account = resolve_account(db, verify_access_token(credentials.credentials))
    logger.debug(f"✅ Account authenticated: {account.email} ({account.user_type})")
    return account


async def require_student(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_student:
        raise HTTPException(status_code=403, detail="Only students can perform this action")
    return account


async def require_salon(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_salon:
        raise HTTPException(status_code=403, detail="Only salons can perform this action")
    return account


async def require_admin(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_admin:
        logger.warning(f"⚠️ Non-admin {account.email} attempted to access the admin area")
        raise HTTPException(status_code=403, detail="Admin access required")
    return account


optional_security = HTTPBearer(auto_error=False)


async def get_optional_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Optional[Account]:
    """Resolve the account when a bearer token is sent, otherwise None"""
    if not credentials:
        return None
    return resolve_account(db, verify_access_token(credentials.credentials))
