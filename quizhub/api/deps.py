"""
Shared request dependencies: caller identity and pagination
"""
from fastapi import Depends, Header, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from quizhub.config import settings
from quizhub.database import get_db
from quizhub.exceptions import InvalidIdFormatError, UnauthenticatedError
from quizhub.models import User
from quizhub.services.user_service import user_service

logger = logging.getLogger(__name__)


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the caller from the X-User-Id header; unknown callers are unauthenticated"""
    if not x_user_id:
        raise UnauthenticatedError("Missing X-User-Id header.")

    try:
        user = user_service.find_by_id(db, x_user_id)
    except InvalidIdFormatError as e:
        raise UnauthenticatedError("Malformed X-User-Id header.") from e

    if not user:
        logger.warning(f"Unknown caller {x_user_id}")
        raise UnauthenticatedError("Unknown user.")
    return user


class Pagination:
    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
    ):
        self.page = page
        self.limit = limit
