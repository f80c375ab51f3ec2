"""Account router - FastAPI endpoints for session and profile operations"""

import logging

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Account, get_current_account
from ...database import get_db
from .schemas import SessionResponse
from .service import AccountService, profile_schema

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Accounts"])


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """Dependency injection for AccountService"""
    return AccountService(db)


@router.get("/auth/session", response_model=SessionResponse)
async def get_session(
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
):
    """Resolve the signed-in account, provisioning the profile if it is missing"""
    return service.get_session(account)


@router.get("/accounts/me")
async def get_profile(account: Account = Depends(get_current_account)):
    return profile_schema(account)


@router.patch("/accounts/me")
async def update_profile(
    data: dict = Body(...),
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
):
    """Update the student or salon profile of the current account"""
    return service.update_profile(account, data)


@router.delete("/accounts/me")
async def delete_account(
    confirm: bool = Query(False),
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
):
    return service.delete_account(account, confirm)
