from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.schemas.hubs import HubOut
from app.services.errors import NotFoundError
from app.services.hubs import get_hub, list_hubs

router = APIRouter(prefix="/hubs", tags=["hubs"])


@router.get("", response_model=list[HubOut])
def active_hubs(db: Session = Depends(get_db)):
    return list_hubs(db)


@router.get("/{hub_id}", response_model=HubOut)
def hub_detail(hub_id: int, db: Session = Depends(get_db)):
    try:
        return get_hub(db, hub_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
