"""Admin service - Read-mostly table browser"""

import logging

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import Account
from ...shared.errors import friendly_error_message
from .registry import ADMIN_TABLES, ROW_LIMIT, TABLES_BY_KEY, AdminTable

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, db: Session):
        self.db = db

    def list_tables(self) -> list[dict]:
        return [
            {
                "key": table.key,
                "label": table.label,
                "columns": table.columns,
                "default_sort": table.default_sort,
                "default_direction": table.default_direction,
            }
            for table in ADMIN_TABLES
        ]

    @staticmethod
    def get_table(key: str) -> AdminTable:
        table = TABLES_BY_KEY.get(key)
        if not table:
            raise HTTPException(status_code=404, detail=f"Unknown table: {key}")
        return table

    def list_rows(self, key: str, sort: str = None, direction: str = None, limit: int = ROW_LIMIT) -> dict:
        table = self.get_table(key)
        sort = sort or table.default_sort
        direction = direction or table.default_direction
        if sort not in table.columns:
            raise HTTPException(status_code=400, detail=f"Cannot sort {key} by {sort}")

        column = getattr(table.model, sort)
        order = column.asc() if direction == "asc" else column.desc()
        rows = self.db.query(table.model).order_by(order).limit(min(limit, ROW_LIMIT)).all()
        return {
            "table": table.key,
            "columns": table.columns,
            "rows": [
                jsonable_encoder({name: getattr(row, name) for name in table.columns}) for row in rows
            ],
        }

    def delete_row(self, key: str, row_id: str, confirm: bool, account: Account) -> dict:
        """Delete one row; ORM cascades remove dependent rows"""
        if not confirm:
            raise HTTPException(status_code=400, detail="Row deletion must be confirmed")
        table = self.get_table(key)
        row = self.db.query(table.model).filter(table.model.id == row_id).first()
        if not row:
            raise HTTPException(status_code=404, detail="Row not found")

        try:
            self.db.delete(row)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"❌ Admin delete failed for {key}/{row_id}: {str(e)}")
            raise HTTPException(status_code=409, detail=friendly_error_message(str(e))) from e

        logger.info(f"🗑️ Admin {account.email} deleted {key}/{row_id}")
        return {"message": "Row deleted", "table": key, "id": row_id}
