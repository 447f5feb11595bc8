from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# ---------- Event ----------
class EventOut(BaseModel):
    id: int
    hub_id: int
    category: str
    title: str
    description: str
    location_name: str
    address: str
    host_name: str
    starts_at: datetime
    ends_at: datetime
    capacity: int
    registered_count: int
    waitlist_count: int
    status: str
    registration_opens_at: Optional[datetime] = None
    registration_closes_at: Optional[datetime] = None
    price_amount: Optional[float] = None
    currency: str
    is_non_deregisterable: bool
    deregistration_deadline_hours_override: Optional[int] = None
    no_show_fee_amount_override: Optional[float] = None

    # derived
    is_free: bool
    is_full: bool
    spots_left: int
    is_past: bool
    price_display: str

    class Config:
        from_attributes = True
