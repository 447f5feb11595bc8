import enum
import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.models.events import Event
from app.models.notifications import Notification, NotificationType
from app.models.registrations import Registration
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class RegistrationChange(str, enum.Enum):
    REGISTERED = "registered"
    WAITLISTED = "waitlisted"
    PROMOTED = "promoted"
    CANCELED = "canceled"


def build_registration_message(event: Event, registration: Registration, change: RegistrationChange) -> tuple[str, str]:
    if change == RegistrationChange.REGISTERED:
        return "You're registered", f"See you at {event.title}!"
    if change == RegistrationChange.WAITLISTED:
        return (
            "You're on the waitlist",
            f"{event.title} is full. You are number {registration.position} on the waitlist.",
        )
    if change == RegistrationChange.PROMOTED:
        return "A spot opened up", f"Good news, you now have a spot at {event.title}."
    return "Registration canceled", f"Your registration for {event.title} has been canceled."


def record_registration_notification(db: Session, registration_id: int, change: RegistrationChange):
    registration = db.get(Registration, registration_id)
    if registration is None:
        logger.warning("Registration %s vanished before its notification was recorded", registration_id)
        return None
    event = db.get(Event, registration.event_id)
    title, body = build_registration_message(event, registration, change)
    notification = Notification(
        user_id=registration.user_id,
        hub_id=event.hub_id,
        title=title,
        body=body,
        type=NotificationType.REGISTRATION.value,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def list_notifications(db: Session, user_id: int) -> dict:
    items = list(
        db.scalars(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.sent_at.desc(), Notification.id.desc())
        )
    )
    unread = db.scalar(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
    )
    return {"items": items, "unread_count": int(unread or 0)}


def mark_read(db: Session, notification_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    if notification is None:
        raise NotFoundError(f"Notification {notification_id} not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    res = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return int(res.rowcount or 0)  # type: ignore
