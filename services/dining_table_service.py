from typing import Any, Dict, List, Mapping
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from domain.models import DiningTable
from domain.schemas.dining_table_schemas import DiningTableCreate, DiningTableUpdate
from domain.schemas.validation import validate_payload
from repositories import DiningTableRepository
from adapters import qr_adapter, storage
from app.exceptions import (
    ConflictError,
    InternalServiceError,
    NotFoundError,
)

logger = logging.getLogger("restaurant.dining_tables")


class DiningTableService:
    @staticmethod
    def list_all(db: Session) -> List[DiningTable]:
        """
        Get every dining table.

        An empty floor plan is reported as NotFoundError rather than an
        empty list; API clients rely on the 404.
        """
        tables = DiningTableRepository(db).get_all()
        if not tables:
            raise NotFoundError("No dining tables found")
        return tables

    @staticmethod
    def get_by_id(db: Session, table_id: int) -> DiningTable:
        table = DiningTableRepository(db).get_by_id(table_id)
        if not table:
            raise NotFoundError("Dining table not found")
        return table

    @staticmethod
    def create(db: Session, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Add a dining table and provision its QR code.

        Steps:
        1. Validate num/size/floor/status (all required)
        2. Reject a duplicate (floor, num) pair
        3. Persist the row
        4. Render the QR code, then save its path on the row

        Args:
            db: Database session
            data: raw request fields

        Returns:
            {"table": DiningTable, "qr_code_url": str}

        Raises:
            ServiceValidationError: invalid or missing fields
            ConflictError: a table with the same floor and number exists
            InternalServiceError: QR code could not be generated (the row is
                kept with qr_code = NULL)
        """
        payload = validate_payload(DiningTableCreate, data)
        repo = DiningTableRepository(db)

        if repo.exists_at(payload.floor, payload.num):
            logger.warning(
                f"create_table rejected: floor={payload.floor} num={payload.num} exists"
            )
            raise ConflictError("Dining table already exists")

        table = DiningTable(**payload.model_dump())
        try:
            repo.create(table)
        except IntegrityError:
            db.rollback()
            raise ConflictError("Dining table already exists")

        qr_path = qr_adapter.generate(table)
        if not qr_path:
            raise InternalServiceError("Failed to generate QR code")

        table.qr_code = qr_path
        repo.update(table)

        logger.info(
            f"table_created table_id={table.id} floor={table.floor} num={table.num} "
            f"qr_code={qr_path}"
        )
        return {"table": table, "qr_code_url": storage.asset_url(qr_path)}

    @staticmethod
    def update(db: Session, table_id: int, data: Mapping[str, Any]) -> DiningTable:
        """
        Apply a sparse patch to a dining table.

        The (floor, num) pair is not re-checked here; a collision is only
        caught by the database constraint and reported as ConflictError.
        """
        patch = validate_payload(DiningTableUpdate, data)
        repo = DiningTableRepository(db)

        table = repo.get_by_id(table_id)
        if not table:
            raise NotFoundError("Dining table not found")

        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(table, field, value)

        try:
            repo.update(table)
        except IntegrityError:
            db.rollback()
            logger.warning(f"update_table rejected: table_id={table_id} duplicate floor/num")
            raise ConflictError("Dining table already exists")

        logger.info(f"table_updated table_id={table_id} fields={sorted(changes)}")
        return table

    @staticmethod
    def delete(db: Session, table_id: int) -> None:
        """Delete a dining table. Its QR code file is left in storage."""
        repo = DiningTableRepository(db)
        if not repo.delete(table_id):
            raise NotFoundError("Dining table not found")
        logger.info(f"table_deleted table_id={table_id}")
