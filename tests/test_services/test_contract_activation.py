import unittest
from datetime import date, datetime, time, timezone
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.database import Base
from core.errors import ConflictError, NotFoundError, TransientInfrastructureError, ValidationError
import models_bootstrap  # noqa: F401
from location.models import Location
from contract.models import (
    Contract, ContractLocation, ContractShiftSchedule, ContractStatus, Customer,
)
from contract import lifecycle, service
from messaging.bus import EventBus
from messaging.events import ContractActivatedEvent
from messaging.models import OutboxMessage
from messaging import outbox


class LifecycleTests(unittest.TestCase):
    def test_check_can_activate(self):
        self.assertIsNone(lifecycle.check_can_activate("HD-1", ContractStatus.draft))
        self.assertIsNone(lifecycle.check_can_activate("HD-1", ContractStatus.pending_approval))
        self.assertIsNone(lifecycle.check_can_activate("HD-1", ContractStatus.schedule_shifts))
        self.assertEqual(lifecycle.check_can_activate("HD-1", ContractStatus.active), "Contract HD-1 is already active")
        self.assertEqual(lifecycle.check_can_activate("HD-1", ContractStatus.expired), "Cannot activate expired contract")
        self.assertEqual(lifecycle.check_can_activate("HD-1", ContractStatus.terminated), "Cannot activate terminated contract")

    def test_expire_contract_status_cascades_once(self):
        self.assertEqual(lifecycle.expire_contract_status(ContractStatus.active), (ContractStatus.expired, True))
        self.assertEqual(lifecycle.expire_contract_status(ContractStatus.schedule_shifts), (ContractStatus.expired, True))
        self.assertEqual(lifecycle.expire_contract_status(ContractStatus.expired), (ContractStatus.expired, False))


class ActivateContractTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        Session = sessionmaker(bind=self.engine, future=True)
        self.db = Session()

        self.received = []
        self.bus = EventBus()
        self.bus.subscribe(ContractActivatedEvent.event_type, self.received.append)

        customer = Customer(company_name="Saigon Retail JSC", email="ops@saigonretail.vn")
        loc = Location(name="Vincom Tower", code="VIN-01", address="72 Le Thanh Ton",
                       latitude=Decimal("10.7769"), longitude=Decimal("106.7009"))
        self.db.add_all([customer, loc])
        self.db.flush()

        self.contract = Contract(
            contract_number="HD-2026-001",
            contract_title="Vincom security",
            customer_id=customer.id,
            start_date=date(2026, 1, 1),
            end_date=date(2026, 12, 31),
            status=ContractStatus.draft,
        )
        self.db.add(self.contract)
        self.db.flush()
        self.db.add(ContractLocation(contract_id=self.contract.id, location_id=loc.id, guards_required=2))
        self.db.add(ContractShiftSchedule(
            contract_id=self.contract.id,
            location_id=loc.id,
            schedule_name="Morning",
            shift_start_time=time(8),
            shift_end_time=time(17),
            duration_hours=Decimal("9"),
            break_minutes=60,
            guards_per_shift=2,
            applies_monday=True, applies_tuesday=True, applies_wednesday=True,
            applies_thursday=True, applies_friday=True,
            effective_from=date(2026, 1, 1),
        ))
        # inactive schedules never reach the event
        self.db.add(ContractShiftSchedule(
            contract_id=self.contract.id,
            schedule_name="Retired",
            shift_start_time=time(6),
            shift_end_time=time(14),
            duration_hours=Decimal("8"),
            effective_from=date(2025, 1, 1),
            is_active=False,
        ))
        self.db.commit()
        self.contract_id = self.contract.id

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _outbox_count(self):
        return self.db.scalar(select(func.count()).select_from(OutboxMessage))

    def test_activate_happy_path(self):
        result = service.activate_contract(self.db, self.contract_id, activated_by=42, manager_id=5, bus=self.bus)

        self.assertTrue(result.success)
        self.assertTrue(result.event_published)
        self.assertEqual(result.activation_info.locations_count, 1)
        self.assertEqual(result.activation_info.schedules_count, 1)

        c = self.db.get(Contract, self.contract_id)
        self.assertEqual(c.status, ContractStatus.schedule_shifts)
        self.assertEqual(c.activated_by, 42)
        self.assertEqual(c.approved_by, 42)
        self.assertIsNotNone(c.approved_at)

        self.assertEqual(len(self.received), 1)
        event = ContractActivatedEvent.model_validate(self.received[0])
        self.assertEqual(event.contract_number, "HD-2026-001")
        self.assertEqual(event.customer_name, "Saigon Retail JSC")
        self.assertEqual(event.manager_id, 5)
        self.assertEqual(event.activated_by, 42)
        self.assertEqual(len(event.locations), 1)
        self.assertEqual(event.locations[0].name, "Vincom Tower")
        self.assertEqual(event.locations[0].guards_required, 2)
        self.assertEqual([s.name for s in event.shift_schedules], ["Morning"])
        self.assertEqual(event.shift_schedules[0].start_time, time(8))

        msg = self.db.scalars(select(OutboxMessage)).one()
        self.assertIsNotNone(msg.published_at)
        self.assertEqual(msg.attempts, 1)

    def test_existing_approval_is_kept(self):
        approved_at = datetime(2025, 12, 20, 3, 0, tzinfo=timezone.utc)
        c = self.db.get(Contract, self.contract_id)
        c.approved_at = approved_at
        c.approved_by = 7
        self.db.commit()

        service.activate_contract(self.db, self.contract_id, activated_by=42, bus=self.bus)
        c = self.db.get(Contract, self.contract_id)
        self.assertEqual(c.approved_by, 7)

    def test_bus_failure_leaves_event_pending_then_relay_delivers(self):
        failing = EventBus()

        def boom(payload):
            raise RuntimeError("broker unreachable")

        failing.subscribe(ContractActivatedEvent.event_type, boom)
        result = service.activate_contract(self.db, self.contract_id, bus=failing)

        # the status change is committed regardless
        self.assertTrue(result.success)
        self.assertFalse(result.event_published)
        self.assertEqual(self.db.get(Contract, self.contract_id).status, ContractStatus.schedule_shifts)

        msg = self.db.scalars(select(OutboxMessage)).one()
        self.assertIsNone(msg.published_at)
        self.assertEqual(msg.last_error, "broker unreachable")

        report = outbox.relay_pending(self.db, self.bus)
        self.assertEqual(report.published, 1)
        self.assertEqual(len(self.received), 1)
        self.assertEqual(outbox.get_pending(self.db), [])

    def test_already_active_is_conflict(self):
        c = self.db.get(Contract, self.contract_id)
        c.status = ContractStatus.active
        self.db.commit()
        with self.assertRaises(ConflictError) as ctx:
            service.activate_contract(self.db, self.contract_id, bus=self.bus)
        self.assertEqual(ctx.exception.detail, "Contract HD-2026-001 is already active")
        self.assertEqual(self._outbox_count(), 0)

    def test_terminal_statuses_are_conflicts(self):
        for status in (ContractStatus.expired, ContractStatus.terminated):
            c = self.db.get(Contract, self.contract_id)
            c.status = status
            self.db.commit()
            with self.assertRaises(ConflictError):
                service.activate_contract(self.db, self.contract_id, bus=self.bus)
        self.assertEqual(self.received, [])

    def test_missing_locations_and_schedules_reported_together(self):
        for row in self.db.scalars(select(ContractLocation)):
            row.is_deleted = True
        for row in self.db.scalars(select(ContractShiftSchedule)):
            row.is_deleted = True
        c = self.db.get(Contract, self.contract_id)
        c.start_date = date(2027, 1, 1)
        self.db.commit()

        with self.assertRaises(ValidationError) as ctx:
            service.activate_contract(self.db, self.contract_id, bus=self.bus)
        self.assertEqual(ctx.exception.detail, [
            "Contract must have at least one location",
            "Contract must have at least one shift schedule",
            "Contract start date must be before end date",
        ])
        self.assertEqual(self.db.get(Contract, self.contract_id).status, ContractStatus.draft)
        self.assertEqual(self._outbox_count(), 0)

    def test_deleted_location_does_not_count(self):
        loc = self.db.scalars(select(Location)).one()
        loc.is_deleted = True
        self.db.commit()
        with self.assertRaises(ValidationError):
            service.activate_contract(self.db, self.contract_id, bus=self.bus)

    def test_missing_or_deleted_contract_is_404(self):
        with self.assertRaises(NotFoundError):
            service.activate_contract(self.db, 999, bus=self.bus)
        c = self.db.get(Contract, self.contract_id)
        c.is_deleted = True
        self.db.commit()
        with self.assertRaises(NotFoundError):
            service.activate_contract(self.db, self.contract_id, bus=self.bus)

    def test_store_failure_rolls_back_everything(self):
        with patch("messaging.outbox.enqueue", side_effect=SQLAlchemyError("connection reset")):
            with self.assertRaises(TransientInfrastructureError) as ctx:
                service.activate_contract(self.db, self.contract_id, bus=self.bus)
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(self.db.get(Contract, self.contract_id).status, ContractStatus.draft)
        self.assertEqual(self._outbox_count(), 0)
        self.assertEqual(self.received, [])


if __name__ == "__main__":
    unittest.main()
