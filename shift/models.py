from __future__ import annotations
from typing import TYPE_CHECKING
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, Text, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base

if TYPE_CHECKING:
    from location.models import Location


class ShiftStatus(str, Enum):
    draft = "draft"
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class Shift(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(primary_key=True)

    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"), index=True
    )
    contract_id: Mapped[int | None] = mapped_column(
        ForeignKey("contracts.id", ondelete="SET NULL"), index=True, nullable=True
    )
    shift_template_id: Mapped[int | None] = mapped_column(
        ForeignKey("shift_templates.id", ondelete="SET NULL"), nullable=True
    )

    shift_date: Mapped[date] = mapped_column(Date(), nullable=False)
    # site-local wall clock; end_at rolls to the next day for overnight shifts
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    end_at:   Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    total_duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    work_duration_minutes:  Mapped[int] = mapped_column(Integer, nullable=False)
    work_duration_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_night_shift: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    required_guards: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    assigned_guards_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[ShiftStatus] = mapped_column(
        SAEnum(ShiftStatus, name="shift_status"), nullable=False, default=ShiftStatus.draft
    )
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    location: Mapped["Location"] = relationship("Location", lazy="joined", passive_deletes=True)

    # UPDATE ... WHERE version = :old; a stale write raises StaleDataError
    __mapper_args__ = {"version_id_col": version}

# overlap lookups: location + time window
Index("ix_shifts_location_start", Shift.location_id, Shift.start_at)
Index("ix_shifts_location_end", Shift.location_id, Shift.end_at)
