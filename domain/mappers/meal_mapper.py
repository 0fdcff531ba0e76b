"""
Meal domain mappers.
Handles transformation between ORM models and the response projections.
"""

from typing import Any, Dict, Mapping, Optional

from domain.models import Meal, MealSizeCost
from domain.schemas.meal_schemas import MealSummary, MealFilterResult


class MealMapper:
    """Mapper for meal-related transformations."""

    @staticmethod
    def cheapest_size_cost(meal: Meal) -> Optional[MealSizeCost]:
        """Minimum-cost variant; the lowest id wins a tie."""
        if not meal.size_costs:
            return None
        return min(meal.size_costs, key=lambda sc: (sc.cost, sc.id))

    @staticmethod
    def first_matching_size_cost(
        meal: Meal, numeric_filters: Mapping[str, Any]
    ) -> Optional[MealSizeCost]:
        """First variant (by id) whose cost, size and piece count all match."""
        for size_cost in meal.size_costs:
            if all(getattr(size_cost, k) == v for k, v in numeric_filters.items()):
                return size_cost
        return None

    @staticmethod
    def to_summary(meal: Meal) -> MealSummary:
        """
        Convert a Meal to the meal-summary projection.

        cost/size/number_of_pieces come from the cheapest variant and are
        null when the meal has none.
        """
        cheapest = MealMapper.cheapest_size_cost(meal)
        return MealSummary(
            id=meal.id,
            name=meal.name,
            description=meal.description,
            image=meal.image,
            type=meal.type,
            status=meal.status,
            category_id=meal.category_id,
            category_name=meal.category.name if meal.category else None,
            cost=cheapest.cost if cheapest else None,
            size=cheapest.size if cheapest else None,
            number_of_pieces=cheapest.number_of_pieces if cheapest else None,
        )

    @staticmethod
    def to_filter_result(
        meal: Meal, numeric_filters: Mapping[str, Any]
    ) -> MealFilterResult:
        match = MealMapper.first_matching_size_cost(meal, numeric_filters)
        return MealFilterResult(
            id=meal.id,
            name=meal.name,
            description=meal.description,
            cost=match.cost if match else None,
            type=meal.type,
            category_id=meal.category_id,
            category_name=meal.category.name if meal.category else None,
            status=meal.status,
            image=meal.image,
        )

    @staticmethod
    def to_size_cost_entry(size_cost: MealSizeCost) -> Dict[str, Any]:
        """Sparse projection: optional columns appear only when set."""
        entry: Dict[str, Any] = {
            "id": size_cost.id,
            "meal_id": size_cost.meal_id,
            "cost": size_cost.cost,
        }
        if size_cost.number_of_pieces is not None:
            entry["number_of_pieces"] = size_cost.number_of_pieces
        if size_cost.size is not None:
            entry["size"] = size_cost.size
        return entry
