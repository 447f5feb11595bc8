from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from app.models.events import Event, EventStatus
from app.services.errors import NotFoundError

LISTED_STATUSES = (EventStatus.PUBLISHED.value, EventStatus.COMPLETED.value)


def get_event(db: Session, event_id: int, *, for_update: bool = False) -> Event:
    """Load an event, optionally taking a row lock for the rest of the transaction."""
    event = db.get(Event, event_id, with_for_update=for_update, populate_existing=for_update)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def claim_seat(db: Session, event_id: int) -> bool:
    """
    Take one registered seat if the event has capacity and nobody is waiting.

    A seat left free while people wait (auto-promotion cutoff) is not up for
    grabs by newcomers; they queue behind the existing waitlist.
    """
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.registered_count < Event.capacity)
        .where(Event.waitlist_count == 0)
        .values(registered_count=Event.registered_count + 1)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    return res.rowcount == 1  # type: ignore


def increment_counts(db: Session, event_id: int, registered_delta: int = 0, waitlist_delta: int = 0) -> Event:
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .values(
            registered_count=Event.registered_count + registered_delta,
            waitlist_count=Event.waitlist_count + waitlist_delta,
        )
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        raise NotFoundError(f"Event {event_id} not found")
    return get_event(db, event_id, for_update=True)


def list_events(
    db: Session,
    *,
    hub_id: int,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> list[Event]:
    stmt = select(Event).where(Event.hub_id == hub_id, Event.status.in_(LISTED_STATUSES))
    if category:
        stmt = stmt.where(Event.category == category)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Event.title.ilike(pattern),
                Event.host_name.ilike(pattern),
                Event.location_name.ilike(pattern),
            )
        )
    return list(db.scalars(stmt.order_by(Event.starts_at, Event.id)))
