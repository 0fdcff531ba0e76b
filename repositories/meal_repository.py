"""
Meal Repository - Data access layer for meals and their size/cost variants
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, Query, selectinload

from repositories.base import BaseRepository
from domain.models import Meal, MealSizeCost


class MealRepository(BaseRepository[Meal]):
    """Repository for meal data access"""

    def __init__(self, db: Session):
        super().__init__(db, Meal)

    def visible_query(self, caller_is_admin: bool) -> Query:
        """Base query with the visibility rule applied: non-admins only see active meals"""
        query = self.db.query(Meal).options(
            selectinload(Meal.size_costs), selectinload(Meal.category)
        )
        if not caller_is_admin:
            query = query.filter(Meal.status.is_(True))
        return query

    def get_visible(self, caller_is_admin: bool) -> List[Meal]:
        return self.visible_query(caller_is_admin).order_by(Meal.id).all()

    def name_taken(self, name: str, ignore_id: Optional[int] = None) -> bool:
        """Check whether another meal already uses ``name``"""
        query = self.db.query(Meal.id).filter(Meal.name == name)
        if ignore_id is not None:
            query = query.filter(Meal.id != ignore_id)
        return query.first() is not None

    def by_category(self, category_id: int, caller_is_admin: bool) -> Query:
        return self.visible_query(caller_is_admin).filter(Meal.category_id == category_id)

    def by_type(self, meal_type: str, caller_is_admin: bool) -> Query:
        return self.visible_query(caller_is_admin).filter(Meal.type == meal_type)

    def by_status(self, status: bool, caller_is_admin: bool) -> Query:
        return self.visible_query(caller_is_admin).filter(Meal.status.is_(status))

    def search(
        self,
        caller_is_admin: bool,
        name: Optional[str] = None,
        cost: Optional[Decimal] = None,
        size: Optional[int] = None,
        number_of_pieces: Optional[int] = None,
        category_id: Optional[int] = None,
        status: Optional[bool] = None,
        meal_type: Optional[str] = None,
    ) -> List[Meal]:
        """
        Dynamic meal search.

        name is a case-insensitive substring match. cost, size and
        number_of_pieces each require at least one variant carrying that
        value (checked independently). The rest are exact matches.
        """
        query = self.visible_query(caller_is_admin)

        if name is not None:
            query = query.filter(Meal.name.icontains(name, autoescape=True))
        if cost is not None:
            query = query.filter(Meal.size_costs.any(MealSizeCost.cost == cost))
        if size is not None:
            query = query.filter(Meal.size_costs.any(MealSizeCost.size == size))
        if number_of_pieces is not None:
            query = query.filter(
                Meal.size_costs.any(MealSizeCost.number_of_pieces == number_of_pieces)
            )
        if category_id is not None:
            query = query.filter(Meal.category_id == category_id)
        if status is not None:
            query = query.filter(Meal.status.is_(status))
        if meal_type is not None:
            query = query.filter(Meal.type == meal_type)

        return query.order_by(Meal.id).all()

    def delete_with_size_costs(self, meal: Meal) -> None:
        """Remove the meal's variants and the meal in a single commit"""
        for size_cost in list(meal.size_costs):
            self.db.delete(size_cost)
        self.db.delete(meal)
        self.db.commit()


class MealSizeCostRepository(BaseRepository[MealSizeCost]):
    """Repository for meal size/cost variants"""

    def __init__(self, db: Session):
        super().__init__(db, MealSizeCost)

    def get_by_meal_id(self, meal_id: int) -> List[MealSizeCost]:
        return (
            self.db.query(MealSizeCost)
            .filter(MealSizeCost.meal_id == meal_id)
            .order_by(MealSizeCost.id)
            .all()
        )

    def get_for_meal(self, meal_id: int, size_cost_id: int) -> Optional[MealSizeCost]:
        """Get a variant by ID, only if it belongs to ``meal_id``"""
        return (
            self.db.query(MealSizeCost)
            .filter(MealSizeCost.meal_id == meal_id, MealSizeCost.id == size_cost_id)
            .first()
        )

    def get_by_meal_and_size(
        self, meal_id: int, size: int, exclude_id: Optional[int] = None
    ) -> Optional[MealSizeCost]:
        query = self.db.query(MealSizeCost).filter(
            MealSizeCost.meal_id == meal_id, MealSizeCost.size == size
        )
        if exclude_id is not None:
            query = query.filter(MealSizeCost.id != exclude_id)
        return query.first()

    def create_size_cost(
        self,
        meal_id: int,
        size: int,
        cost: Decimal,
        number_of_pieces: Optional[int] = None,
        commit: bool = True,
    ) -> MealSizeCost:
        """Create a new size/cost variant for a meal"""
        size_cost = MealSizeCost(
            meal_id=meal_id,
            size=size,
            cost=cost,
            number_of_pieces=number_of_pieces,
        )
        return self.create(size_cost, commit=commit)

