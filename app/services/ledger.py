"""
Registration ledger: row-level reads and writes on ``event_registrations``.

Nothing here commits; callers own the transaction boundary.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.models.registrations import ACTIVE_STATUSES, Registration, RegistrationStatus
from app.services.errors import NotFoundError


def get_registration(db: Session, registration_id: int, *, for_update: bool = False) -> Registration:
    registration = db.get(
        Registration,
        registration_id,
        with_for_update=for_update,
        populate_existing=for_update,
    )
    if registration is None:
        raise NotFoundError(f"Registration {registration_id} not found")
    return registration


def find_active(db: Session, event_id: int, user_id: int) -> Optional[Registration]:
    """Return the user's non-canceled registration for the event, if any."""
    return db.scalar(
        select(Registration).where(
            Registration.event_id == event_id,
            Registration.user_id == user_id,
            Registration.status != RegistrationStatus.CANCELED.value,
        )
    )


def insert(db: Session, registration: Registration) -> Registration:
    db.add(registration)
    db.flush()  # gets registration.id, surfaces unique index violations
    return registration


def update_status(
    db: Session,
    registration_id: int,
    status: RegistrationStatus,
    canceled_at: Optional[datetime] = None,
) -> Registration:
    registration = get_registration(db, registration_id)
    registration.status = status.value
    if status != RegistrationStatus.WAITLISTED:
        registration.position = None
    if canceled_at is not None:
        registration.canceled_at = canceled_at
    db.flush()
    return registration


def list_waitlisted(db: Session, event_id: int) -> list[Registration]:
    return list(
        db.scalars(
            select(Registration)
            .where(
                Registration.event_id == event_id,
                Registration.status == RegistrationStatus.WAITLISTED.value,
            )
            .order_by(Registration.position.asc(), Registration.id.asc())
        )
    )


def close_waitlist_gap(db: Session, event_id: int, position: int) -> None:
    """Shift every waitlist position behind ``position`` forward by one."""
    db.execute(
        update(Registration)
        .where(
            Registration.event_id == event_id,
            Registration.status == RegistrationStatus.WAITLISTED.value,
            Registration.position > position,
        )
        .values(position=Registration.position - 1)
        .execution_options(synchronize_session="fetch")
    )


def list_for_user(db: Session, user_id: int, *, active_only: bool = False) -> list[Registration]:
    stmt = select(Registration).where(Registration.user_id == user_id)
    if active_only:
        stmt = stmt.where(Registration.status.in_(ACTIVE_STATUSES))
    return list(db.scalars(stmt.order_by(Registration.registered_at.desc(), Registration.id.desc())))
