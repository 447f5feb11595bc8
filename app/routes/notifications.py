from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.schemas.notifications import NotificationOut
from app.services.errors import NotFoundError
from app.services.notifications import mark_read

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/{notification_id}/read", response_model=NotificationOut)
def read_notification(notification_id: int, db: Session = Depends(get_db)):
    try:
        return mark_read(db, notification_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
