from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    user_id: int = Field(ge=1)


class RegistrationOut(BaseModel):
    id: int
    event_id: int
    user_id: int
    status: str
    position: Optional[int] = None
    registered_at: datetime
    canceled_at: Optional[datetime] = None

    class Config:
        from_attributes = True
