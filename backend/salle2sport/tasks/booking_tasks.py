"""Celery tasks for booking maintenance."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, ParamSpec, Protocol, TypedDict, TypeVar, cast

from sqlalchemy.exc import OperationalError

from salle2sport.core.clock import SystemClock, parse_instant
from salle2sport.database import session_scope
from salle2sport.services.no_show_sweeper import NoShowSweeper
from salle2sport.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R", covariant=True)


class TaskWrapper(Protocol[P, R]):
    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> R:
        ...

    def delay(self, *args: P.args, **kwargs: P.kwargs) -> Any:
        ...

    def apply_async(self, *args: Any, **kwargs: Any) -> Any:
        ...


def typed_task(
    *task_args: Any, **task_kwargs: Any
) -> Callable[[Callable[P, R]], TaskWrapper[P, R]]:
    """Return a typed Celery task decorator for mypy."""
    return cast(
        Callable[[Callable[P, R]], TaskWrapper[P, R]],
        celery_app.task(*task_args, **task_kwargs),
    )


class SweepResult(TypedDict):
    count: int
    swept_at: str


@typed_task(
    name="salle2sport.tasks.booking_tasks.sweep_no_shows",
    autoretry_for=(OperationalError,),
    max_retries=3,
)
def sweep_no_shows(at: Optional[str] = None) -> SweepResult:
    """
    Mark CONFIRMED bookings of already-started classes as NO_SHOW.

    Args:
        at: Optional ISO-8601 cut-off; defaults to the current time
    """
    clock = SystemClock()
    cutoff = parse_instant(at) or clock.now()

    with session_scope() as db:
        count = NoShowSweeper(db, clock).sweep(cutoff)

    logger.info(f"No-show sweep at {cutoff.isoformat()} updated {count} booking(s)")
    return {"count": count, "swept_at": cutoff.isoformat()}
