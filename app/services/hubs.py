from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.hubs import Hub
from app.services.errors import NotFoundError


def get_hub(db: Session, hub_id: int) -> Hub:
    hub: Optional[Hub] = db.get(Hub, hub_id)
    if hub is None:
        raise NotFoundError(f"Hub {hub_id} not found")
    return hub


def list_hubs(db: Session) -> list[Hub]:
    """Active hubs, alphabetically."""
    return list(db.scalars(select(Hub).where(Hub.is_active.is_(True)).order_by(Hub.name)))
