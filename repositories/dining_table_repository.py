"""
Dining Table Repository - Data access layer for seating
"""

from typing import Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import DiningTable


class DiningTableRepository(BaseRepository[DiningTable]):
    """Repository for dining table data access"""

    def __init__(self, db: Session):
        super().__init__(db, DiningTable)

    def get_by_floor_and_num(self, floor: int, num: int) -> Optional[DiningTable]:
        return (
            self.db.query(DiningTable)
            .filter(DiningTable.floor == floor, DiningTable.num == num)
            .first()
        )

    def exists_at(self, floor: int, num: int) -> bool:
        """Check whether a table with this (floor, num) pair already exists"""
        return self.get_by_floor_and_num(floor, num) is not None
