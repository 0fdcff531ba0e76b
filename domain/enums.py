"""
Domain enums for the restaurant menu.
Contains all enumeration types used across the domain models.
"""

import enum


class MealType(str, enum.Enum):
    """Dietary classification of a meal"""

    VEGETARIAN = "vegetarian"
    NON_VEGETARIAN = "non-vegetarian"


class MealStatusFilter(str, enum.Enum):
    """Status tokens accepted by the status filter"""

    ACTIVE = "active"
    INACTIVE = "inactive"

    def as_bool(self) -> bool:
        return self is MealStatusFilter.ACTIVE
