# backend/salle2sport/services/user_service.py
"""
Member management.

Emails are unique regardless of case; they are stored lower-cased and
every lookup lower-cases its input.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.exceptions import (
    ActiveBookingsException,
    EmailAlreadyExistsException,
    NotFoundException,
)
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.user import UserCreate, UserUpdate
from .base import BaseService

logger = logging.getLogger(__name__)


class UserService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.repository = RepositoryFactory.create_user_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("create_user")
    def create_user(self, data: Union[UserCreate, Mapping[str, Any]]) -> User:
        """
        Register a member.

        Raises:
            ValidationException: Missing name or malformed email
            EmailAlreadyExistsException: Email taken, compared case-insensitively
        """
        payload = self.parse_payload(UserCreate, data)
        self.log_operation("create_user", email=payload.email)

        with self.transaction():
            if self.repository.email_exists(payload.email):
                raise EmailAlreadyExistsException(details={"email": payload.email})
            user = self.repository.create(
                firstname=payload.firstname,
                lastname=payload.lastname,
                email=payload.email,
                role=payload.role,
                date_joined=self.now(),
            )

        self.logger.info(f"User {user.id} created with role {user.role}")
        return user

    @BaseService.measure_operation("update_user")
    def update_user(self, user_id: str, data: Union[UserUpdate, Mapping[str, Any]]) -> User:
        payload = self.parse_payload(UserUpdate, data)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        with self.transaction():
            user = self.get_user(user_id)
            new_email = changes.get("email")
            if new_email and new_email != user.email:
                if self.repository.email_exists(new_email, exclude_user_id=user_id):
                    raise EmailAlreadyExistsException(details={"email": new_email})
            self.repository.update(user_id, **changes)

        self.logger.info(f"User {user_id} updated: {sorted(changes)}")
        return user

    def get_user(self, user_id: str) -> User:
        user = self.repository.get_by_id(user_id, load_relationships=False)
        if not user:
            raise NotFoundException("User not found", details={"user_id": user_id})
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.repository.get_by_email(email)

    def list_users(
        self,
        role: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[User]:
        return self.repository.search(role=role, search=search, limit=limit, offset=offset)

    @BaseService.measure_operation("delete_user")
    def delete_user(self, user_id: str) -> None:
        """
        Remove a member and their history.

        Raises:
            NotFoundException: Unknown user
            ActiveBookingsException: The member holds confirmed bookings on upcoming classes
        """
        with self.transaction():
            self.get_user(user_id)
            if self.booking_repository.has_future_confirmed_bookings(user_id, self.now()):
                raise ActiveBookingsException(
                    "Cannot delete user with active bookings", details={"user_id": user_id}
                )
            self.repository.delete(user_id)

        self.logger.info(f"User {user_id} deleted")
