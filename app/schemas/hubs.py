from pydantic import BaseModel


class HubOut(BaseModel):
    id: int
    name: str
    country: str
    timezone: str
    currency: str
    deregistration_deadline_hours: int
    waitlist_auto_promote_cutoff_hours: int
    default_no_show_fee_amount: float
    is_active: bool

    class Config:
        from_attributes = True
