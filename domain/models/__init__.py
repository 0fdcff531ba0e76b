"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
)
from domain.models.category import Category
from domain.models.meal import Meal, MealSizeCost
from domain.models.dining_table import DiningTable

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    # Menu models
    "Category",
    "Meal",
    "MealSizeCost",
    # Seating models
    "DiningTable",
]
