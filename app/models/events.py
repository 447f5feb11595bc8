import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import as_utc, utcnow
from app.database.db import Base


class EventCategory(str, enum.Enum):
    CONNECT = "Connect"
    LEARN = "Learn"
    GROW = "Grow"


class EventStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELED = "canceled"
    COMPLETED = "completed"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_events_capacity_positive"),
        CheckConstraint("registered_count >= 0", name="ck_events_registered_count_non_negative"),
        CheckConstraint("waitlist_count >= 0", name="ck_events_waitlist_count_non_negative"),
        CheckConstraint("registered_count <= capacity", name="ck_events_registered_within_capacity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    hub_id: Mapped[int] = mapped_column(ForeignKey("hubs.id"), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(16), nullable=False, default=EventCategory.CONNECT.value)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    address: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    host_name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    registered_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    waitlist_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=EventStatus.DRAFT.value)
    registration_opens_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    registration_closes_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    price_amount: Mapped[Optional[float]] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    is_non_deregisterable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deregistration_deadline_hours_override: Mapped[Optional[int]] = mapped_column(Integer)
    no_show_fee_amount_override: Mapped[Optional[float]] = mapped_column(Float)

    hub: Mapped["Hub"] = relationship(back_populates="events")
    registrations: Mapped[list["Registration"]] = relationship(back_populates="event")

    @property
    def is_free(self) -> bool:
        return not self.price_amount

    @property
    def is_full(self) -> bool:
        return self.registered_count >= self.capacity

    @property
    def spots_left(self) -> int:
        return max(0, self.capacity - self.registered_count)

    @property
    def is_past(self) -> bool:
        return as_utc(self.ends_at) < utcnow()

    @property
    def price_display(self) -> str:
        if not self.price_amount or self.price_amount <= 0:
            return "Free"
        return f"{self.currency} {self.price_amount:.2f}"
