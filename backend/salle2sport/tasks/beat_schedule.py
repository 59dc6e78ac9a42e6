# backend/salle2sport/tasks/beat_schedule.py
"""
Celery Beat schedule for Salle2Sport.
"""

from datetime import timedelta
from typing import Any, Dict

from celery.schedules import crontab

from salle2sport.core.config import settings


def get_beat_schedule() -> Dict[str, Dict[str, Any]]:
    """Periodic tasks; the sweep interval comes from settings."""
    return {
        # Reclassify CONFIRMED bookings whose class has started
        "sweep-no-shows": {
            "task": "salle2sport.tasks.booking_tasks.sweep_no_shows",
            "schedule": timedelta(minutes=settings.no_show_sweep_minutes),
            "options": {"expires": settings.no_show_sweep_minutes * 60},
        },
        "celery-health-check": {
            "task": "salle2sport.tasks.health_check",
            "schedule": crontab(minute="*/30"),
        },
    }
