import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.db import Base


class RegistrationStatus(str, enum.Enum):
    REGISTERED = "registered"
    WAITLISTED = "waitlisted"
    CANCELED = "canceled"
    ATTENDED = "attended"
    NO_SHOW = "no_show"


ACTIVE_STATUSES = (RegistrationStatus.REGISTERED.value, RegistrationStatus.WAITLISTED.value)


class Registration(Base):
    __tablename__ = "event_registrations"
    __table_args__ = (
        # at most one non-canceled registration per (event, user)
        Index(
            "uq_event_registrations_active",
            "event_id",
            "user_id",
            unique=True,
            postgresql_where=text("status != 'canceled'"),
            sqlite_where=text("status != 'canceled'"),
        ),
        Index("ix_event_registrations_waitlist", "event_id", "status", "position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=RegistrationStatus.REGISTERED.value)
    position: Mapped[Optional[int]] = mapped_column(Integer)
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    canceled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    event: Mapped["Event"] = relationship(back_populates="registrations")
