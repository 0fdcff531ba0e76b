"""Dining table management routes (admin only)"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, require_admin
from api.responses import success_response
from domain.schemas.dining_table_schemas import (
    DiningTableCreate,
    DiningTableUpdate,
    DiningTableResponse,
)
from services import DiningTableService

router = APIRouter(
    prefix="/dining-tables",
    tags=["Dining Tables"],
    dependencies=[Depends(require_admin)],
)
logger = logging.getLogger("restaurant.api.dining_tables")


@router.get("")
def list_dining_tables(db: Session = Depends(get_db)):
    """
    Get all dining tables.

    Returns 404 when no table exists yet, not an empty list.
    """
    tables = DiningTableService.list_all(db)
    return success_response(data=[DiningTableResponse.model_validate(t) for t in tables])


@router.get("/{table_id}")
def get_dining_table(table_id: int, db: Session = Depends(get_db)):
    """Get a dining table by ID"""
    table = DiningTableService.get_by_id(db, table_id)
    return success_response(data=DiningTableResponse.model_validate(table))


@router.post("", status_code=status.HTTP_201_CREATED)
def add_dining_table(payload: DiningTableCreate, db: Session = Depends(get_db)):
    """
    Add a dining table and generate its QR code.

    Raises:
        400: invalid or missing fields
        409: a table with the same floor and number exists
        500: QR code generation failed
    """
    result = DiningTableService.create(db, payload.model_dump())
    return success_response(
        data=DiningTableResponse.model_validate(result["table"]),
        qr_code_url=result["qr_code_url"],
    )


@router.put("/{table_id}")
def update_dining_table(
    table_id: int, patch: DiningTableUpdate, db: Session = Depends(get_db)
):
    """Update any subset of floor, size, num and status"""
    table = DiningTableService.update(db, table_id, patch.model_dump(exclude_unset=True))
    return success_response(data=DiningTableResponse.model_validate(table))


@router.delete("/{table_id}")
def delete_dining_table(table_id: int, db: Session = Depends(get_db)):
    """Delete a dining table"""
    DiningTableService.delete(db, table_id)
    return success_response(message="Dining table deleted successfully")
