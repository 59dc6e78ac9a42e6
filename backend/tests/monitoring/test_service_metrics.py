"""Tests for operation timing and Prometheus export."""

from datetime import datetime

import pytest

from salle2sport.core.exceptions import NotFoundException
from salle2sport.monitoring.prometheus_metrics import REGISTRY, prometheus_metrics
from salle2sport.services.base import BaseService
from salle2sport.services.booking_service import BookingService

from conftest import NOW


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_measured_operation_updates_counters(db, clock):
    service = BookingService(db, clock)
    service.reset_metrics()
    before_errors = _sample(
        "salle2sport_errors_total",
        service="BookingService",
        operation="cancel_booking",
        error_type="NotFoundException",
    )

    with pytest.raises(NotFoundException):
        service.cancel_booking("01HUNKNOWNBOOKING00000000", "01HUNKNOWNUSER00000000000")

    metrics = service.get_metrics()["cancel_booking"]
    assert metrics["count"] == 1
    assert metrics["failure_count"] == 1
    assert metrics["success_rate"] == 0.0
    assert (
        _sample(
            "salle2sport_errors_total",
            service="BookingService",
            operation="cancel_booking",
            error_type="NotFoundException",
        )
        == before_errors + 1
    )


def test_booking_transitions_counter(db, clock, factory):
    before = _sample("salle2sport_booking_transitions_total", to_status="CONFIRMED")

    BookingService(db, clock).create_booking(factory.user().id, factory.session().id)

    assert _sample("salle2sport_booking_transitions_total", to_status="CONFIRMED") == before + 1


def test_zero_count_transitions_are_not_recorded():
    before = _sample("salle2sport_booking_transitions_total", to_status="CANCELLED_BY_CLASS")
    prometheus_metrics.record_booking_transition("CANCELLED_BY_CLASS", 0)
    assert _sample("salle2sport_booking_transitions_total", to_status="CANCELLED_BY_CLASS") == before


def test_exposition_format():
    prometheus_metrics.record_sweep(3)

    body = prometheus_metrics.get_metrics().decode()

    assert "salle2sport_no_show_sweep_last_count 3.0" in body
    assert prometheus_metrics.get_content_type().startswith("text/plain")


def test_service_time_comes_from_injected_clock(db, clock):
    now = BaseService(db, clock).now()

    assert now == NOW
    assert isinstance(now, datetime)
    assert now.tzinfo is not None
