"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Generic, TypeVar, Optional, List, Tuple, Type
from sqlalchemy.orm import Session, Query
from abc import ABC

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.
    All repositories should inherit from this class.

    Every model in this service uses an integer ``id`` primary key, so
    ``get_by_id`` is implemented here rather than in each subclass.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: int) -> Optional[ModelType]:
        """
        Get entity by ID.

        Args:
            entity_id: Integer primary key

        Returns:
            Entity or None if not found
        """
        return self.db.get(self.model, entity_id)

    def get_all(self) -> List[ModelType]:
        """Get all entities ordered by ID"""
        return self.db.query(self.model).order_by(self.model.id).all()

    def create(self, entity: ModelType, commit: bool = True) -> ModelType:
        """Create new entity; with commit=False the row is only flushed"""
        self.db.add(entity)
        if commit:
            self.db.commit()
            self.db.refresh(entity)
        else:
            self.db.flush()
        return entity

    def update(self, entity: ModelType, commit: bool = True) -> ModelType:
        """Update existing entity"""
        if commit:
            self.db.commit()
            self.db.refresh(entity)
        else:
            self.db.flush()
        return entity

    def delete(self, entity_id: int) -> bool:
        """Delete entity by ID"""
        entity = self.get_by_id(entity_id)
        if entity:
            self.db.delete(entity)
            self.db.commit()
            return True
        return False

    def exists(self, entity_id: int) -> bool:
        """Check if entity exists"""
        return self.get_by_id(entity_id) is not None

    def paginate(
        self, query: Query, page: int, per_page: int
    ) -> Tuple[List[ModelType], int]:
        """
        Run one page of ``query``.

        Returns:
            (items on the page, total number of rows)
        """
        total = query.order_by(None).count()
        items = (
            query.order_by(self.model.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return items, total
