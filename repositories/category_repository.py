"""
Category Repository - read-only lookup of menu categories
"""

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Category


class CategoryRepository(BaseRepository[Category]):
    """Repository for category lookups"""

    def __init__(self, db: Session):
        super().__init__(db, Category)
