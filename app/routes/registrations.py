from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.schemas.registrations import RegistrationOut
from app.services.errors import (
    ConflictError,
    DeadlineExpiredError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    StoreUnavailableError,
)
from app.services.ledger import get_registration
from app.services.registrations import deregister

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.get("/{registration_id}", response_model=RegistrationOut)
def registration_detail(registration_id: int, db: Session = Depends(get_db)):
    try:
        return get_registration(db, registration_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{registration_id}/deregister", status_code=204, response_class=Response)
def cancel_registration(registration_id: int, db: Session = Depends(get_db)):
    try:
        deregister(db, registration_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except (DeadlineExpiredError, InvalidStateError, ConflictError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return Response(status_code=204)
