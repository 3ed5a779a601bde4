# tests/test_services/test_location_services.py
import unittest
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from core.database import Base
import models_bootstrap  # noqa: F401
from location.models import Location
from location import service
from location.schemas import LocationCreatePayload, LocationUpdate


class LocationServiceTests(unittest.TestCase):
    def setUp(self):
        # Fresh in-memory DB
        self.engine = create_engine("sqlite:///:memory:", future=True)
        # models must be imported before create_all so tables exist
        Base.metadata.create_all(self.engine)

        TestingSession = sessionmaker(bind=self.engine, future=True)
        self.db = TestingSession()

        # --- seed locations ---
        l1 = Location(name="Vincom Tower", code="VIN-01", address="72 Le Thanh Ton")
        l2 = Location(name="Bitexco", code="BTX-01", is_deleted=True)
        self.db.add_all([l1, l2])
        self.db.commit()
        self.l1_id = l1.id
        self.l2_id = l2.id

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_get_locations_hides_soft_deleted(self):
        rows = service.get_locations(self.db)
        self.assertEqual([r.id for r in rows], [self.l1_id])

    def test_get_location_returns_none_for_deleted(self):
        self.assertIsNotNone(service.get_location(self.db, self.l1_id))
        self.assertIsNone(service.get_location(self.db, self.l2_id))
        self.assertIsNone(service.get_location(self.db, 999))

    def test_create_location_persists_coordinates(self):
        payload = LocationCreatePayload(
            name="Landmark 81", code="LM-81",
            latitude=Decimal("10.7950"), longitude=Decimal("106.7218"), geofence_radius_m=150,
        )
        row = service.create_location(self.db, payload)
        self.assertIsNotNone(row.id)
        self.assertEqual(row.geofence_radius_m, 150)
        self.assertEqual(row.latitude, Decimal("10.7950000"))

    def test_create_location_duplicate_code_raises_integrity_error(self):
        with self.assertRaises(IntegrityError):
            service.create_location(self.db, LocationCreatePayload(name="Dup", code="VIN-01"))

    def test_update_location_changes_only_sent_fields(self):
        row = service.update_location(self.db, self.l1_id, LocationUpdate(name="Vincom Center"))
        self.assertEqual(row.name, "Vincom Center")
        self.assertEqual(row.address, "72 Le Thanh Ton")

    def test_update_missing_location_returns_none(self):
        self.assertIsNone(service.update_location(self.db, 999, LocationUpdate(name="x")))

    def test_delete_location_is_soft(self):
        service.delete_location(self.db, self.l1_id)
        self.assertIsNone(service.get_location(self.db, self.l1_id))
        self.assertTrue(self.db.get(Location, self.l1_id).is_deleted)


if __name__ == "__main__":
    unittest.main()
