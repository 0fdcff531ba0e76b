"""Services package - Business logic layer"""

from services.dining_table_service import DiningTableService
from services.meal_service import MealService

__all__ = [
    "DiningTableService",
    "MealService",
]
