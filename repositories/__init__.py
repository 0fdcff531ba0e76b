"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.category_repository import CategoryRepository
from repositories.meal_repository import MealRepository, MealSizeCostRepository
from repositories.dining_table_repository import DiningTableRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "MealRepository",
    "MealSizeCostRepository",
    "DiningTableRepository",
]
