from __future__ import annotations
from datetime import date, datetime, time
from decimal import Decimal
from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Time, text,
)
from sqlalchemy.orm import Mapped, mapped_column
from core.database import Base

class ShiftTemplate(Base):
    __tablename__ = "shift_templates"

    id: Mapped[int] = mapped_column(primary_key=True)

    contract_id: Mapped[int | None] = mapped_column(ForeignKey("contracts.id", ondelete="SET NULL"), index=True, nullable=True)
    manager_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    template_code: Mapped[str] = mapped_column(String(120), nullable=False)
    template_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)

    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time:   Mapped[time] = mapped_column(Time, nullable=False)
    duration_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_night_shift:   Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_overnight:     Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    crosses_midnight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    applies_monday:    Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_tuesday:   Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_wednesday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_thursday:  Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_friday:    Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_saturday:  Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_sunday:    Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    min_guards_required: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_guards_allowed:  Mapped[int | None] = mapped_column(Integer, nullable=True)
    optimal_guards:      Mapped[int | None] = mapped_column(Integer, nullable=True)

    # location snapshot taken at import time
    location_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    location_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    location_latitude:  Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)
    location_longitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)

    effective_from: Mapped[date | None] = mapped_column(Date(), nullable=True)
    effective_to:   Mapped[date | None] = mapped_column(Date(), nullable=True)

    status: Mapped[str] = mapped_column(String(40), nullable=False, default="await_create_shift")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        # one live template per code; soft-deleted rows may repeat it
        Index(
            "uq_shift_templates_code_live", "template_code", unique=True,
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("is_deleted = false"),
        ),
    )
