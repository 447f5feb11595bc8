import logging
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional, TypeVar

import redis
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.core.clock import as_utc, utcnow
from app.core.config import (
    DEFAULT_DEREGISTRATION_DEADLINE_HOURS,
    EVENT_LOCK_BLOCKING_TIMEOUT_SECONDS,
    EVENT_LOCK_TIMEOUT_SECONDS,
    get_redis_url,
)
from app.models.events import Event, EventStatus
from app.models.hubs import Hub
from app.models.registrations import ACTIVE_STATUSES, Registration, RegistrationStatus
from app.services import events as event_store
from app.services import ledger
from app.services.errors import (
    ConflictError,
    DeadlineExpiredError,
    ForbiddenError,
    InvalidStateError,
    StoreUnavailableError,
)
from app.services.notifications import RegistrationChange
from app.tasks import emit_registration_change

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


@contextmanager
def _event_lock(event_id: int) -> Iterator[None]:
    """
    Serialize register/deregister for one event across every replica.

    The row lock taken inside the transaction covers the same window on
    databases that support ``SELECT ... FOR UPDATE``.
    """
    redis_client = get_redis_client()
    lock = redis_client.lock(
        f"event_lock:{event_id}",
        timeout=EVENT_LOCK_TIMEOUT_SECONDS,
        blocking_timeout=EVENT_LOCK_BLOCKING_TIMEOUT_SECONDS,
    )
    try:
        acquired = lock.acquire(blocking=True, blocking_timeout=EVENT_LOCK_BLOCKING_TIMEOUT_SECONDS)
    except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
        raise StoreUnavailableError("Registration lock server is unavailable.") from e
    if not acquired:
        raise ConflictError("Event is busy, please try again.")
    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # expired under us; the transaction has already finished either way
            logger.warning("Lock for event %s expired before release", event_id)


def _run_in_transaction(db: Session, fn: Callable[..., T], *args) -> T:
    try:
        if db.in_transaction():
            # Use the transaction the session already started and commit it
            try:
                result = fn(db, *args)
                db.commit()
            except Exception:
                db.rollback()
                raise
            return result
        with db.begin():
            return fn(db, *args)
    except IntegrityError as e:
        raise ConflictError("Registration conflicts with the current state of the event, please try again.") from e
    except OperationalError as e:
        raise StoreUnavailableError("Registration store is unavailable.") from e


def _check_open_for_registration(event: Event, now: datetime) -> None:
    if event.status != EventStatus.PUBLISHED.value:
        raise InvalidStateError(f"Event is {event.status}, registration is not possible.")
    if event.registration_opens_at is not None and now < as_utc(event.registration_opens_at):
        raise InvalidStateError("Registration has not opened yet.")
    if event.registration_closes_at is not None and now > as_utc(event.registration_closes_at):
        raise InvalidStateError("Registration is closed.")
    if now > as_utc(event.ends_at):
        raise InvalidStateError("Event has already ended.")


def register_for_event(
    db: Session,
    *,
    event_id: int,
    user_id: int,
    now: Optional[datetime] = None,
) -> tuple[Registration, bool]:
    """
    Register a user for an event, or put them on its waitlist when it is full.

    Returns ``(registration, created)``. Registering again while a
    non-canceled registration exists returns that registration with
    ``created=False`` instead of writing a second row.
    """
    now = as_utc(now) if now is not None else utcnow()
    with _event_lock(event_id):
        registration, created = _run_in_transaction(db, _register_in_transaction, event_id, user_id, now)

    if created:
        logger.info(
            "User %s %s for event %s (registration=%s position=%s)",
            user_id, registration.status, event_id, registration.id, registration.position,
        )
        emit_registration_change(registration.id, RegistrationChange(registration.status))
    return registration, created


def _register_in_transaction(
    db: Session, event_id: int, user_id: int, now: datetime
) -> tuple[Registration, bool]:
    event = event_store.get_event(db, event_id, for_update=True)

    existing = ledger.find_active(db, event_id, user_id)
    if existing is not None:
        return existing, False

    _check_open_for_registration(event, now)

    if event_store.claim_seat(db, event_id):
        status, position = RegistrationStatus.REGISTERED, None
    else:
        event = event_store.increment_counts(db, event_id, waitlist_delta=1)
        status, position = RegistrationStatus.WAITLISTED, event.waitlist_count

    registration = ledger.insert(
        db,
        Registration(
            event_id=event_id,
            user_id=user_id,
            status=status.value,
            position=position,
            registered_at=now,
        ),
    )
    return registration, True


def deregistration_cutoff(event: Event, hub: Optional[Hub]) -> datetime:
    """Last instant at which a registration for ``event`` may still be canceled."""
    if event.deregistration_deadline_hours_override is not None:
        hours = event.deregistration_deadline_hours_override
    elif hub is not None:
        hours = hub.deregistration_deadline_hours
    else:
        hours = DEFAULT_DEREGISTRATION_DEADLINE_HOURS
    return as_utc(event.starts_at) - timedelta(hours=hours)


def deregister(db: Session, registration_id: int, *, now: Optional[datetime] = None) -> Registration:
    """
    Cancel a registration, handing a freed seat to the head of the waitlist.

    Cancellation, promotion and the event count updates commit together.
    """
    now = as_utc(now) if now is not None else utcnow()
    try:
        event_id = ledger.get_registration(db, registration_id).event_id
    except OperationalError as e:
        raise StoreUnavailableError("Registration store is unavailable.") from e

    with _event_lock(event_id):
        registration, promoted = _run_in_transaction(db, _deregister_in_transaction, registration_id, now)

    logger.info("Registration %s for event %s canceled", registration_id, event_id)
    emit_registration_change(registration.id, RegistrationChange.CANCELED)
    if promoted is not None:
        logger.info("Registration %s promoted from waitlist for event %s", promoted.id, event_id)
        emit_registration_change(promoted.id, RegistrationChange.PROMOTED)
    return registration


def _deregister_in_transaction(
    db: Session, registration_id: int, now: datetime
) -> tuple[Registration, Optional[Registration]]:
    registration = ledger.get_registration(db, registration_id, for_update=True)
    if registration.status not in ACTIVE_STATUSES:
        raise InvalidStateError(f"Registration is {registration.status}, nothing to cancel.")

    event = event_store.get_event(db, registration.event_id, for_update=True)
    if event.is_non_deregisterable:
        raise ForbiddenError("This event does not allow deregistration.")

    hub = db.get(Hub, event.hub_id)
    if now > deregistration_cutoff(event, hub):
        raise DeadlineExpiredError("The deregistration deadline for this event has passed.")

    was_waitlisted = registration.status == RegistrationStatus.WAITLISTED.value
    old_position = registration.position
    ledger.update_status(db, registration.id, RegistrationStatus.CANCELED, canceled_at=now)

    promoted = None
    if was_waitlisted:
        if old_position is not None:
            ledger.close_waitlist_gap(db, event.id, old_position)
        event_store.increment_counts(db, event.id, waitlist_delta=-1)
    else:
        promoted = _promote_next(db, event, hub, now)
        if promoted is None:
            event_store.increment_counts(db, event.id, registered_delta=-1)
        else:
            # seat moves to the promoted user; registered_count is unchanged
            event_store.increment_counts(db, event.id, waitlist_delta=-1)

    return registration, promoted


def _promote_next(db: Session, event: Event, hub: Optional[Hub], now: datetime) -> Optional[Registration]:
    if hub is not None:
        cutoff = as_utc(event.starts_at) - timedelta(hours=hub.waitlist_auto_promote_cutoff_hours)
        if now > cutoff:
            return None

    waitlisted = ledger.list_waitlisted(db, event.id)
    if not waitlisted:
        return None

    head = waitlisted[0]
    head_position = head.position
    ledger.update_status(db, head.id, RegistrationStatus.REGISTERED)
    if head_position is not None:
        ledger.close_waitlist_gap(db, event.id, head_position)
    return head


def list_user_events(
    db: Session,
    user_id: int,
    *,
    when: str = "upcoming",
    now: Optional[datetime] = None,
) -> list[Event]:
    """Events on a member's "my events" screen."""
    now = as_utc(now) if now is not None else utcnow()
    stmt = select(Event).join(Registration, Registration.event_id == Event.id).where(
        Registration.user_id == user_id
    )
    if when == "past":
        stmt = stmt.where(Event.ends_at < now).order_by(Event.starts_at.desc())
    else:
        stmt = stmt.where(
            Registration.status.in_(ACTIVE_STATUSES),
            Event.ends_at >= now,
        ).order_by(Event.starts_at.asc())
    return list(db.scalars(stmt.distinct()))
