# backend/salle2sport/repositories/user_repository.py
"""User data access. Emails are compared lower-cased everywhere."""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email.strip().lower())

    def email_exists(self, email: str, exclude_user_id: Optional[str] = None) -> bool:
        try:
            query = self._build_query().filter(User.email == email.strip().lower())
            if exclude_user_id:
                query = query.filter(User.id != exclude_user_id)
            return query.first() is not None
        except SQLAlchemyError as e:
            self.logger.error("Error checking email existence: %s", e)
            raise RepositoryException(f"Failed to check email: {e}") from e

    def search(
        self,
        role: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[User]:
        """Newest members first, optionally filtered by role and a name/email fragment."""
        query = self._build_query()
        if role:
            query = query.filter(User.role == role)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(
                    User.email.like(pattern),
                    User.firstname.ilike(pattern),
                    User.lastname.ilike(pattern),
                )
            )
        query = query.order_by(User.date_joined.desc()).offset(offset).limit(limit)
        return self._execute_query(query)
