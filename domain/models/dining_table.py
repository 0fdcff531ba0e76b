"""
Seating models.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from domain.models.database import Base


class DiningTable(Base):
    """Physical dining table, addressed by floor and number"""

    __tablename__ = "dining_tables"

    id = Column(Integer, primary_key=True, autoincrement=True)
    num = Column(Integer, nullable=False)
    size = Column(Integer, nullable=False)
    floor = Column(Integer, nullable=False)
    status = Column(Boolean, nullable=False, default=True)
    qr_code = Column(String(255))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("floor", "num", name="uq_dining_table_floor_num"),
    )
