from __future__ import annotations
import logging
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from core.database import SessionLocal
from core.errors import TransientInfrastructureError
from messaging.bus import EventBus
from messaging.events import ContractActivatedEvent
from .schema import ImportTemplatesCommand, ImportTemplatesResult
from . import service

log = logging.getLogger(__name__)


def to_import_command(event: ContractActivatedEvent) -> ImportTemplatesCommand:
    return ImportTemplatesCommand(
        contract_id=event.contract_id,
        contract_number=event.contract_number,
        locations=event.locations,
        shift_schedules=event.shift_schedules,
        manager_id=event.manager_id,
        imported_by=event.activated_by,
    )

def handle_contract_activated(
    payload: Dict[str, Any],
    session_factory: Callable[[], Session] = SessionLocal,
) -> ImportTemplatesResult:
    event = ContractActivatedEvent.model_validate(payload)
    log.info(
        "ContractActivatedEvent received for %s: %d locations, %d schedules",
        event.contract_number, len(event.locations), len(event.shift_schedules),
    )
    with session_factory() as db:
        result = service.import_templates(db, to_import_command(event))
    if result.transient_errors:
        # raising keeps the outbox message pending; re-import is idempotent by code
        raise TransientInfrastructureError(
            f"Template import for {event.contract_number} hit store errors: "
            + ", ".join(result.transient_errors)
        )
    if result.errors:
        log.warning("Template import for %s finished with errors: %s", event.contract_number, result.errors)
    return result

def register(bus: EventBus, session_factory: Callable[[], Session] = SessionLocal) -> None:
    bus.subscribe(
        ContractActivatedEvent.event_type,
        lambda payload: handle_contract_activated(payload, session_factory),
    )
