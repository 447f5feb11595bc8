import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database.db import Base


class NotificationType(str, enum.Enum):
    ANNOUNCEMENT = "announcement"
    EVENT_UPDATE = "event_update"
    SYSTEM = "system"
    MEMBERSHIP = "membership"
    REGISTRATION = "registration"


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    hub_id: Mapped[Optional[int]] = mapped_column(ForeignKey("hubs.id"))
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(32), nullable=False, default=NotificationType.SYSTEM.value)
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
