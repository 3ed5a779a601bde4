from __future__ import annotations
from datetime import datetime
from typing import Any
from sqlalchemy import DateTime, Integer, String, Text, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
from core.database import Base

class OutboxMessage(Base):
    __tablename__ = "outbox_messages"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    created_at:   Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text(), nullable=True)

Index("ix_outbox_pending", OutboxMessage.published_at, OutboxMessage.id)
