"""
Meal and per-size pricing models.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    Numeric,
    TIMESTAMP,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.models.database import Base


class Meal(Base):
    """Menu item with one or more size/cost variants"""

    __tablename__ = "meals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    image = Column(String(255))
    status = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    category = relationship("Category")
    size_costs = relationship(
        "MealSizeCost",
        back_populates="meal",
        cascade="all, delete-orphan",
        order_by="MealSizeCost.id",
    )


class MealSizeCost(Base):
    """Priced variant of a meal, distinguished by size code"""

    __tablename__ = "meal_size_costs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    meal_id = Column(
        Integer, ForeignKey("meals.id", ondelete="CASCADE"), nullable=False
    )
    size = Column(Integer, nullable=False)
    cost = Column(Numeric(10, 2), nullable=False)
    number_of_pieces = Column(Integer)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    meal = relationship("Meal", back_populates="size_costs")

    __table_args__ = (
        UniqueConstraint("meal_id", "size", name="uq_meal_size_cost_meal_size"),
        CheckConstraint("size BETWEEN 1 AND 4", name="ck_meal_size_cost_size_range"),
        CheckConstraint("cost >= 1", name="ck_meal_size_cost_cost_min"),
        CheckConstraint(
            "number_of_pieces IS NULL OR number_of_pieces >= 1",
            name="ck_meal_size_cost_pieces_min",
        ),
    )
