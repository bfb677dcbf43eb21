# =============================================================================
# workers/celery_app.py - Celery Application Configuration
# =============================================================================
# Creates the worker app for ledger writes and similarity analysis. The
# broker comes from app.config (REDIS_URL, read from the environment or
# .env by pydantic-settings); routing and limits live in workers.config.
#
# Queues:
#   default - similarity analysis
#   ledger  - contract writes (slow receipts, never retried)
#
# Usage:
#   celery -A workers.celery_app worker -Q default,ledger --loglevel=info
#   celery -A workers.celery_app status
# =============================================================================

import logging
from typing import Any
from urllib.parse import urlsplit

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun

from app.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

WORKER_QUEUES = ("default", "ledger")


def redact_url(url: str) -> str:
    """Broker URL without its password, for logs."""
    parts = urlsplit(url)
    if not parts.password:
        return url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    user = f"{parts.username}:***@" if parts.username else ":***@"
    return parts._replace(netloc=user + host).geturl()


def task_subject(kwargs: dict[str, Any] | None) -> str:
    """The filing a task works on, as a log suffix."""
    filing_id = (kwargs or {}).get("filing_id")
    return f" (filing {filing_id})" if filing_id else ""


def create_celery_app() -> Celery:
    """
    Create the worker app.

    Returns:
        Celery app bound to the configured Redis broker and result backend
    """
    app = Celery(
        "innovatehub_worker",
        broker=settings.REDIS_URL,
        backend=settings.REDIS_URL,
        include=["workers.tasks"],
    )

    app.config_from_object("workers.config:CeleryConfig")

    logger.info(
        f"Celery app created with broker {redact_url(settings.REDIS_URL)}, "
        f"queues: {', '.join(WORKER_QUEUES)}"
    )
    return app


celery_app = create_celery_app()


@celery_app.task(bind=True, name="workers.healthcheck")
def healthcheck(self) -> dict[str, Any]:
    """
    Report that a worker is consuming and which queues it serves.

    Usage:
        healthcheck.delay().get(timeout=5)
    """
    return {"status": "OK", "queues": list(WORKER_QUEUES)}


# =============================================================================
# Celery Signals (Lifecycle Hooks)
# =============================================================================

@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, **extra):
    logger.info(f"Task started: {task.name} [{task_id}]{task_subject(kwargs)}")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, retval=None, state=None, **extra):
    # Ledger and similarity tasks report failure in their result, not by raising
    outcome = ""
    if isinstance(retval, dict) and retval.get("success") is False:
        outcome = f" - {retval.get('error', 'failed')}"
    logger.info(f"Task completed: {task.name} [{task_id}]{task_subject(kwargs)} - State: {state}{outcome}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, kwargs=None, traceback=None, **extra):
    logger.error(f"Task failed: {sender.name} [{task_id}]{task_subject(kwargs)} - Error: {exception}")


if __name__ == "__main__":
    celery_app.start()
