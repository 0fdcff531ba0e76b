"""Health check routes"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db
from app.config import settings

router = APIRouter(tags=["Health"])
logger = logging.getLogger("restaurant.api.health")


@router.get("/health-check")
def health_check(db: Session = Depends(get_db)):
    """Basic health check endpoint, including a database round trip"""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.exception("Database health check failed")
        database = f"error: {e}"
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "database": database,
    }
