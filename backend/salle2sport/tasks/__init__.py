"""
Celery tasks package for Salle2Sport.

Importing the package registers every task with the Celery app.
"""

from salle2sport.tasks.booking_tasks import sweep_no_shows
from salle2sport.tasks.celery_app import BaseTask, celery_app, health_check

__all__ = ["BaseTask", "celery_app", "health_check", "sweep_no_shows"]
