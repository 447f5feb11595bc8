from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.models.events import EventCategory
from app.schemas.events import EventOut
from app.schemas.registrations import RegisterRequest, RegistrationOut
from app.services.errors import ConflictError, InvalidStateError, NotFoundError, StoreUnavailableError
from app.services.events import get_event, list_events
from app.services.registrations import register_for_event

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[EventOut])
def browse_events(
    hub_id: int,
    category: Optional[EventCategory] = None,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return list_events(db, hub_id=hub_id, category=category.value if category else None, search=q)


@router.get("/{event_id}", response_model=EventOut)
def event_snapshot(event_id: int, db: Session = Depends(get_db)):
    try:
        return get_event(db, event_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{event_id}/register", response_model=RegistrationOut, status_code=201)
def register(event_id: int, payload: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    try:
        registration, created = register_for_event(db, event_id=event_id, user_id=payload.user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not created:
        # replayed request, nothing new was written
        response.status_code = 200
    return registration
