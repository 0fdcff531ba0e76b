"""
API dependencies for dependency injection
"""

import secrets
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import UnauthorizedError
from domain.models import get_db_session

_bearer = HTTPBearer(auto_error=False, description="Admin API token")


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


def is_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> bool:
    """
    Whether the caller presented the admin bearer token.

    Anonymous callers are allowed through as non-admins; services receive
    the result as an explicit ``caller_is_admin`` flag.
    """
    if credentials is None:
        return False
    return secrets.compare_digest(
        credentials.credentials.encode("utf-8"),
        settings.admin_api_token.encode("utf-8"),
    )


def require_admin(caller_is_admin: bool = Depends(is_admin)) -> bool:
    """Reject the request unless the caller is an admin."""
    if not caller_is_admin:
        raise UnauthorizedError("Admin credentials required")
    return True
