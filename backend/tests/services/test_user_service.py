"""Tests for member registration and management."""

from datetime import timedelta

import pytest

from salle2sport.core.enums import BookingStatus
from salle2sport.core.exceptions import (
    ActiveBookingsException,
    EmailAlreadyExistsException,
    NotFoundException,
    ValidationException,
)
from salle2sport.models import User
from salle2sport.services.user_service import UserService

from conftest import NOW


@pytest.fixture
def service(db, clock) -> UserService:
    return UserService(db, clock)


def _payload(**overrides):
    data = {"firstname": "Jeanne", "lastname": "Martin", "email": "jeanne.martin@salle2sport.fr"}
    data.update(overrides)
    return data


class TestCreateUser:
    def test_creates_member(self, service):
        user = service.create_user(_payload())

        assert user.id
        assert user.role == "USER"
        assert user.date_joined == NOW
        assert user.full_name == "Jeanne Martin"

    def test_email_is_lowercased(self, service):
        user = service.create_user(_payload(email="Jeanne.MARTIN@Salle2Sport.fr"))
        assert user.email == "jeanne.martin@salle2sport.fr"

    def test_duplicate_email_is_case_insensitive(self, service):
        service.create_user(_payload())

        with pytest.raises(EmailAlreadyExistsException):
            service.create_user(_payload(email="JEANNE.martin@salle2sport.fr", firstname="Autre"))

    def test_admin_role(self, service):
        assert service.create_user(_payload(role="ADMIN")).is_admin

    @pytest.mark.parametrize(
        "overrides",
        [{"email": "not-an-email"}, {"firstname": ""}, {"role": "COACH"}, {"nickname": "jj"}],
    )
    def test_invalid_payload(self, service, overrides):
        with pytest.raises(ValidationException):
            service.create_user(_payload(**overrides))


class TestUpdateAndLookup:
    def test_update_email_to_taken_address(self, service, factory):
        factory.user(email="prise@salle2sport.fr")
        user = factory.user()

        with pytest.raises(EmailAlreadyExistsException):
            service.update_user(user.id, {"email": "PRISE@salle2sport.fr"})

    def test_update_names(self, service, factory):
        user = factory.user()
        updated = service.update_user(user.id, {"lastname": "Durand"})
        assert updated.lastname == "Durand"

    def test_get_by_email_ignores_case(self, service, factory):
        user = factory.user(email="case@salle2sport.fr")
        assert service.get_user_by_email("CASE@Salle2Sport.fr").id == user.id

    def test_unknown_user(self, service):
        with pytest.raises(NotFoundException):
            service.get_user("01HUNKNOWNUSER00000000000")

    def test_list_filters_by_role(self, service, factory):
        factory.user()
        admin = factory.admin()
        assert [u.id for u in service.list_users(role="ADMIN")] == [admin.id]


class TestDeleteUser:
    def test_refused_with_upcoming_confirmed_booking(self, service, factory):
        user = factory.user()
        factory.booking(user, factory.session(starts_at=NOW + timedelta(days=1)))

        with pytest.raises(ActiveBookingsException):
            service.delete_user(user.id)

    def test_allowed_with_only_past_or_cancelled_bookings(self, service, db, factory):
        user = factory.user()
        factory.booking(user, factory.session(starts_at=NOW - timedelta(days=2), coach="A"), status=BookingStatus.NO_SHOW)
        factory.booking(user, factory.session(coach="B"), status=BookingStatus.CANCELLED)

        service.delete_user(user.id)

        db.expire_all()
        assert db.get(User, user.id) is None
