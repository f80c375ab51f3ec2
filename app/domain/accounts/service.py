"""Account service - Business logic for profile operations"""

import logging
from typing import Union

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...auth import Account
from ...utils.sanitization import sanitize_request_text
from .repository import AccountRepository
from .schemas import SalonProfile, SalonUpdate, SessionResponse, StudentProfile, StudentUpdate

logger = logging.getLogger(__name__)


def profile_schema(account: Account) -> Union[StudentProfile, SalonProfile]:
    if account.is_student:
        return StudentProfile.model_validate(account.profile)
    return SalonProfile.model_validate(account.profile)


class AccountService:
    """Service layer for profile business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AccountRepository()

    def get_session(self, account: Account) -> SessionResponse:
        return SessionResponse(
            id=account.id,
            email=account.email,
            user_type=account.user_type,
            is_admin=account.is_admin,
            profile=profile_schema(account),
        )

    def update_profile(self, account: Account, data: dict) -> Union[StudentProfile, SalonProfile]:
        """Validate a role-specific update and apply it"""
        schema = StudentUpdate if account.is_student else SalonUpdate
        try:
            update = schema.model_validate(data)
        except ValidationError as e:
            raise HTTPException(
                status_code=422, detail=e.errors(include_url=False, include_context=False)
            ) from e

        updates = update.model_dump(exclude_unset=True)
        for key in ("description", "address"):
            if key in updates:
                updates[key] = sanitize_request_text(updates[key])

        self.repo.update_profile(self.db, account.profile, **updates)
        logger.info(f"✅ Profile updated for {account.email}")
        return profile_schema(account)

    def delete_account(self, account: Account, confirm: bool) -> dict:
        """Delete the account profile; listings, reservations and messages go with it"""
        if not confirm:
            raise HTTPException(status_code=400, detail="Account deletion must be confirmed")

        self.repo.delete_profile(self.db, account.profile)
        logger.info(f"🗑️ Account deleted: {account.email} ({account.user_type})")
        return {"message": "Account deleted"}
