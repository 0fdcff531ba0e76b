"""
Menu category model (read-only reference data).
"""

from sqlalchemy import Column, Integer, String

from domain.models.database import Base


class Category(Base):
    """Menu category a meal belongs to"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
