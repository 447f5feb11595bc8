from typing import Literal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.schemas.events import EventOut
from app.schemas.notifications import MarkAllReadOut, NotificationListOut
from app.schemas.registrations import RegistrationOut
from app.services.ledger import list_for_user
from app.services.notifications import list_notifications, mark_all_read
from app.services.registrations import list_user_events

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/registrations", response_model=list[RegistrationOut])
def user_registrations(user_id: int, active_only: bool = False, db: Session = Depends(get_db)):
    return list_for_user(db, user_id, active_only=active_only)


@router.get("/{user_id}/events", response_model=list[EventOut])
def user_events(
    user_id: int,
    when: Literal["upcoming", "past"] = "upcoming",
    db: Session = Depends(get_db),
):
    return list_user_events(db, user_id, when=when)


@router.get("/{user_id}/notifications", response_model=NotificationListOut)
def user_notifications(user_id: int, db: Session = Depends(get_db)):
    return list_notifications(db, user_id)


@router.post("/{user_id}/notifications/read-all", response_model=MarkAllReadOut)
def read_all_notifications(user_id: int, db: Session = Depends(get_db)):
    return {"updated": mark_all_read(db, user_id)}
