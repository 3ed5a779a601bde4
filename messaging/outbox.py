"""
Transactional outbox.

Events are written in the same transaction as the state change they describe
and delivered afterwards by ``relay_pending``. Delivery is at-least-once:
consumers must tolerate duplicates (the template import is idempotent by
template code; user deactivation is idempotent by e-mail).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from core.config_loader import settings
from .bus import EventBus, bus as default_bus
from .models import OutboxMessage

log = logging.getLogger(__name__)


@dataclass
class RelayReport:
    published: int = 0
    failed: int = 0
    published_ids: list[int] = field(default_factory=list)


def enqueue(db: Session, event: BaseModel) -> OutboxMessage:
    """Stage an event in the caller's transaction. Does not commit."""
    row = OutboxMessage(
        event_type=type(event).event_type,
        payload=event.model_dump(mode="json"),
        created_at=datetime.now(timezone.utc),
        attempts=0,
    )
    db.add(row)
    return row


def get_pending(db: Session, *, limit: Optional[int] = None) -> list[OutboxMessage]:
    stmt = (
        select(OutboxMessage)
        .where(
            OutboxMessage.published_at.is_(None),
            OutboxMessage.attempts < settings.OUTBOX_MAX_ATTEMPTS,
        )
        .order_by(OutboxMessage.id.asc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.scalars(stmt))


def deliver(db: Session, msg: OutboxMessage, bus: Optional[EventBus] = None) -> bool:
    """Publish one message and record the outcome. Returns True when delivered."""
    bus = bus or default_bus
    msg.attempts += 1
    try:
        bus.publish(msg.event_type, msg.payload)
    except Exception as exc:
        log.warning("Outbox message %s (%s) failed to publish: %s", msg.id, msg.event_type, exc)
        msg.last_error = str(exc)[:2000]
        db.commit()
        return False

    msg.published_at = datetime.now(timezone.utc)
    msg.last_error = None
    db.commit()
    return True


def relay_pending(db: Session, bus: Optional[EventBus] = None, *, limit: Optional[int] = None) -> RelayReport:
    """Publish pending messages in id order; each message is its own transaction."""
    report = RelayReport()
    for msg in get_pending(db, limit=limit or settings.OUTBOX_RELAY_BATCH):
        if deliver(db, msg, bus):
            report.published += 1
            report.published_ids.append(msg.id)
        else:
            report.failed += 1
    if report.published or report.failed:
        log.info("Outbox relay: published=%d failed=%d", report.published, report.failed)
    return report
