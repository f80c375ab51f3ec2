"""Admin router - table browser restricted to the admin allow-list"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Account, require_admin
from ...database import get_db
from .registry import ROW_LIMIT
from .service import AdminService

router = APIRouter(prefix="/admin", tags=["Admin"])


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db)


@router.get("/tables")
async def list_tables(
    account: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_tables()


@router.get("/tables/{table}/rows")
async def list_rows(
    table: str,
    sort: Optional[str] = Query(None),
    direction: Optional[str] = Query(None, pattern="^(asc|desc)$"),
    limit: int = Query(ROW_LIMIT, ge=1, le=ROW_LIMIT),
    account: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_rows(table, sort, direction, limit)


@router.delete("/tables/{table}/rows/{row_id}")
async def delete_row(
    table: str,
    row_id: str,
    confirm: bool = Query(False),
    account: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.delete_row(table, row_id, confirm, account)
