"""API routes package"""

from . import dining_tables, meals, health

__all__ = ["dining_tables", "meals", "health"]
