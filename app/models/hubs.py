from sqlalchemy import Boolean, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.db import Base


class Hub(Base):
    """A city-level community chapter; owns events and their deadline rules."""

    __tablename__ = "hubs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    country: Mapped[str] = mapped_column(String(80), nullable=False, default="")
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    deregistration_deadline_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    waitlist_auto_promote_cutoff_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    default_no_show_fee_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    events: Mapped[list["Event"]] = relationship(back_populates="hub")
