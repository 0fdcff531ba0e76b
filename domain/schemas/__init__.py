"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.meal_schemas import (
    MealCreate,
    MealUpdate,
    SizeCostUpsert,
    MealFilter,
    MealSummary,
    MealFilterResult,
    Pagination,
)
from domain.schemas.dining_table_schemas import (
    DiningTableCreate,
    DiningTableUpdate,
    DiningTableResponse,
)
from domain.schemas.validation import validate_payload, image_errors

__all__ = [
    # Meal schemas
    "MealCreate",
    "MealUpdate",
    "SizeCostUpsert",
    "MealFilter",
    "MealSummary",
    "MealFilterResult",
    "Pagination",
    # Dining table schemas
    "DiningTableCreate",
    "DiningTableUpdate",
    "DiningTableResponse",
    # Validation helpers
    "validate_payload",
    "image_errors",
]
