import logging

from app.core.celery_config import celery_app
from app.database.db import SessionLocal
from app.models import events, hubs, notifications, registrations  # noqa: F401
from app.services.notifications import RegistrationChange, record_registration_notification

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def deliver_registration_notification(self, registration_id: int, change: str):
    """Record an inbox notification for a registration state change."""
    db = SessionLocal()
    try:
        notification = record_registration_notification(db, registration_id, RegistrationChange(change))
    finally:
        db.close()
    if notification is not None:
        logger.info("Recorded %s notification %s for registration %s", change, notification.id, registration_id)


def emit_registration_change(registration_id: int, change: RegistrationChange) -> None:
    """
    Hand a registration state change to the notification worker.

    Runs after the registration transaction has committed; a failure to
    enqueue is logged and never reaches the caller.
    """
    try:
        deliver_registration_notification.delay(registration_id, change.value)
    except Exception:
        logger.warning(
            "Could not enqueue %s notification for registration %s",
            change.value, registration_id, exc_info=True,
        )
