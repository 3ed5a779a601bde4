"""
Contract document expiration sweep.

Run on a schedule (cron, or POST /api/contracts/check-expired). Safe to run
any number of times: what has already happened is read back from the stored
document classification and contract status, never from sweep bookkeeping.
"""
from __future__ import annotations
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config_loader import settings
from core.errors import NotFoundError
from messaging import outbox
from messaging.bus import EventBus
from messaging.events import DeactivateGuardEvent, DeactivateManagerEvent, DeactivateUserEvent
from notification.service import Notifier, get_notifier
from .models import Contract, ContractDocument, ContractStatus, ContractType, DocumentClassification
from .schema import ContractExpirationDetail, ContractExpiryStatus, SweepResult
from .lifecycle import expire_contract_status

log = logging.getLogger(__name__)

EXPIRY_REASON = "Contract expired"
EXPIRING_SOON_DAYS = 30

MANAGER_TYPES = frozenset({ContractType.manager_working_contract, ContractType.extended_working_contract})
GUARD_TYPES = frozenset({ContractType.working_contract})

# worst first
_SEVERITY = (
    DocumentClassification.expired_document,
    DocumentClassification.near_expired,
    DocumentClassification.normal,
)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)

def local_zone() -> ZoneInfo:
    return ZoneInfo(settings.LOCAL_TIMEZONE)

def near_expiry_horizon() -> timedelta:
    return timedelta(days=settings.NEAR_EXPIRY_DAYS)


# ---------- Pure rules ----------

def classify_document(end_local: datetime, now_local: datetime, horizon: timedelta) -> DocumentClassification:
    if end_local <= now_local:
        return DocumentClassification.expired_document
    if end_local <= now_local + horizon:
        return DocumentClassification.near_expired
    return DocumentClassification.normal

def days_remaining(end_local: datetime, now_local: datetime) -> int:
    # truncates toward zero: 6.9 days left reads as 6
    return int((end_local - now_local) / timedelta(days=1))

def deactivation_events(
    contract_type: ContractType,
    email: str,
    reason: str = EXPIRY_REASON,
    at: Optional[datetime] = None,
) -> list[BaseModel]:
    at = at or datetime.now(timezone.utc)
    if contract_type in MANAGER_TYPES:
        return [
            DeactivateUserEvent(email=email, user_type="manager", reason=reason, deactivated_at=at),
            DeactivateManagerEvent(email=email, reason=reason, deactivated_at=at),
        ]
    if contract_type in GUARD_TYPES:
        return [
            DeactivateUserEvent(email=email, user_type="guard", reason=reason, deactivated_at=at),
            DeactivateGuardEvent(email=email, reason=reason, deactivated_at=at),
        ]
    if contract_type == ContractType.service_contract:
        return [DeactivateUserEvent(email=email, user_type="customer", reason=reason, deactivated_at=at)]
    log.warning("No deactivation rule for contract type %s", contract_type)
    return []


# ---------- Sweep ----------

def get_sweep_candidates(db: Session, horizon_utc: datetime) -> list[ContractDocument]:
    stmt = (
        select(ContractDocument)
        .join(Contract, Contract.id == ContractDocument.contract_id)
        .where(
            ContractDocument.is_deleted.is_(False),
            ContractDocument.end_date.is_not(None),
            ContractDocument.end_date <= horizon_utc,
            ContractDocument.classification != DocumentClassification.expired_document,
            Contract.is_deleted.is_(False),
        )
        .order_by(ContractDocument.end_date, ContractDocument.id)
    )
    return list(db.scalars(stmt))

def _detail(doc: ContractDocument, contract: Contract, end_utc: datetime, days: int, action: str) -> ContractExpirationDetail:
    return ContractExpirationDetail(
        document_id=doc.id,
        document_name=doc.document_name,
        contract_id=contract.id,
        contract_number=contract.contract_number,
        contract_type=contract.contract_type,
        end_date=end_utc,
        days_remaining=days,
        email=doc.document_email,
        action=action,
    )

def _count_deactivations(result: SweepResult, events: list[BaseModel]) -> None:
    for event in events:
        if not isinstance(event, DeactivateUserEvent):
            continue
        if event.user_type == "manager":
            result.managers_deactivated += 1
        elif event.user_type == "guard":
            result.guards_deactivated += 1
        elif event.user_type == "customer":
            result.customers_deactivated += 1

def _expire_document(db: Session, doc: ContractDocument, now_utc: datetime) -> list[BaseModel]:
    """One transaction: document, contract and any cascade events go together."""
    contract = doc.contract
    doc.classification = DocumentClassification.expired_document
    doc.updated_at = now_utc

    new_status, cascade = expire_contract_status(contract.status)
    events: list[BaseModel] = []
    if cascade:
        contract.status = new_status
        contract.updated_at = now_utc
        if doc.document_email:
            events = deactivation_events(contract.contract_type, doc.document_email, EXPIRY_REASON, now_utc)
            for event in events:
                outbox.enqueue(db, event)
        else:
            log.warning("Contract %s expired but document %s has no e-mail; nobody to deactivate",
                        contract.contract_number, doc.id)
    db.commit()
    return events

def run_sweep(
    db: Session,
    *,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
    bus: Optional[EventBus] = None,
) -> SweepResult:
    notifier = notifier or get_notifier()
    tz = local_zone()
    horizon = near_expiry_horizon()
    now_utc = _aware(now).astimezone(timezone.utc) if now else datetime.now(timezone.utc)
    now_local = now_utc.astimezone(tz)

    result = SweepResult()
    candidates = get_sweep_candidates(db, now_utc + horizon)
    log.info("Expiration sweep at %s: %d candidate documents", now_local.isoformat(), len(candidates))

    for doc in candidates:
        contract = doc.contract
        end_utc = _aware(doc.end_date)
        end_local = end_utc.astimezone(tz)
        classification = classify_document(end_local, now_local, horizon)
        days = days_remaining(end_local, now_local)

        if classification == DocumentClassification.expired_document:
            was_expired = contract.status == ContractStatus.expired
            try:
                events = _expire_document(db, doc, now_utc)
            except SQLAlchemyError as exc:
                db.rollback()
                log.exception("Failed to expire document %s of contract %s", doc.id, contract.contract_number)
                result.errors.append(f"Document {doc.id}: {exc}")
                continue
            _count_deactivations(result, events)
            result.expired_count += 1
            result.expired.append(_detail(doc, contract, end_utc, days, "expired"))
            log.info(
                "Contract %s document %s expired (%s)",
                contract.contract_number, doc.id,
                "already expired, no cascade" if was_expired else f"{len(events)} deactivation events",
            )

        elif classification == DocumentClassification.near_expired:
            if doc.classification == DocumentClassification.near_expired:
                continue  # already notified
            try:
                doc.classification = DocumentClassification.near_expired
                doc.updated_at = now_utc
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                log.exception("Failed to mark document %s near expired", doc.id)
                result.errors.append(f"Document {doc.id}: {exc}")
                continue

            detail = _detail(doc, contract, end_utc, days, "near_expired")
            result.near_expired_count += 1
            result.near_expired.append(detail)
            try:
                notifier.send_near_expiry_notice(detail)
            except Exception as exc:
                log.warning("Near-expiry notice for document %s failed: %s", doc.id, exc)

    try:
        report = outbox.relay_pending(db, bus)
        result.events_published = report.published
        result.events_pending = report.failed
    except SQLAlchemyError as exc:
        db.rollback()
        log.exception("Outbox relay after sweep failed; messages stay pending")
        result.errors.append(f"Relay: {exc}")

    progressed = result.expired_count + result.near_expired_count
    result.success = not result.errors or progressed > 0
    log.info(
        "Expiration sweep done: near_expired=%d expired=%d managers=%d guards=%d customers=%d published=%d pending=%d errors=%d",
        result.near_expired_count, result.expired_count, result.managers_deactivated,
        result.guards_deactivated, result.customers_deactivated,
        result.events_published, result.events_pending, len(result.errors),
    )
    return result


# ---------- Single contract ----------

def check_contract_expiry(db: Session, contract_id: int, now: Optional[datetime] = None) -> ContractExpiryStatus:
    contract = db.get(Contract, contract_id)
    if contract is None or contract.is_deleted:
        raise NotFoundError("Contract not found")

    now_utc = _aware(now) if now else datetime.now(timezone.utc)
    today: date = now_utc.astimezone(local_zone()).date()
    remaining = (contract.end_date - today).days

    if remaining < 0:
        state = "expired"
    elif remaining == 0:
        state = "expired_today"
    elif remaining <= settings.NEAR_EXPIRY_DAYS:
        state = "near_expired"
    elif remaining <= EXPIRING_SOON_DAYS:
        state = "expiring_soon"
    else:
        state = "active"

    stored = {d.classification for d in contract.documents if not d.is_deleted}
    classification = next((c for c in _SEVERITY if c in stored), None)

    return ContractExpiryStatus(
        contract_id=contract.id,
        contract_number=contract.contract_number,
        end_date=contract.end_date,
        days_remaining=remaining,
        status=state,
        classification=classification,
    )
