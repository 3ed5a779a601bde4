import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError


from main import app
from core.database import get_db
from authz.deps import get_current_actor, require_manager


def _loc(**kw):
    data = dict(id=1, name="Vincom Tower", code="VIN-01", address=None,
                latitude=None, longitude=None, geofence_radius_m=100)
    data.update(kw)
    return Obj(**data)


class LocationRouterTests(unittest.TestCase):
    def setUp(self):
        class FakeDB:
            def rollback(self): pass
        def _fake_db():
            yield FakeDB()

        app.dependency_overrides[get_db] = _fake_db
        app.dependency_overrides[get_current_actor] = lambda: Obj(id=7, role="manager")
        app.dependency_overrides[require_manager] = lambda: 7

        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_current_actor, None)
        app.dependency_overrides.pop(require_manager, None)

    # --- LIST ---

    @patch("location.router.service.get_locations")
    def test_get_locations_happy_path(self, mock_get):
        mock_get.return_value = [_loc()]
        resp = self.client.get("/api/locations")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()[0]["code"], "VIN-01")

    # --- CREATE ---

    @patch("location.router.service.create_location")
    def test_create_location_201(self, mock_create):
        mock_create.return_value = _loc(id=10, name="Landmark 81", code="LM-81")
        resp = self.client.post("/api/locations", json={"name": "Landmark 81", "code": "LM-81"})
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()["id"], 10)

    def test_create_location_422_on_unknown_field(self):
        resp = self.client.post("/api/locations", json={"name": "X", "code": "X", "org_id": 2})
        self.assertEqual(resp.status_code, 422)

    def test_create_location_422_on_bad_latitude(self):
        resp = self.client.post("/api/locations", json={"name": "X", "code": "X", "latitude": 120})
        self.assertEqual(resp.status_code, 422)

    @patch("location.router.service.create_location")
    def test_create_location_409_duplicate_code(self, mock_create):
        mock_create.side_effect = IntegrityError("stmt", "params", Exception("dup"))
        resp = self.client.post("/api/locations", json={"name": "Dup", "code": "VIN-01"})
        self.assertEqual(resp.status_code, 409, resp.text)
        self.assertEqual(resp.json()["detail"], "Location code already exists")

    # --- GET /{id} ---

    @patch("location.router.service.get_location")
    def test_get_location_404(self, mock_get):
        mock_get.return_value = None
        resp = self.client.get("/api/locations/999")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Location not found")

    # --- PATCH /{id} ---

    @patch("location.router.service.update_location")
    def test_update_location_200(self, mock_update):
        mock_update.return_value = _loc(name="Vincom Center")
        resp = self.client.patch("/api/locations/1", json={"name": "Vincom Center"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["name"], "Vincom Center")

    @patch("location.router.service.update_location")
    def test_update_location_404(self, mock_update):
        mock_update.return_value = None
        resp = self.client.patch("/api/locations/999", json={"name": "Nope"})
        self.assertEqual(resp.status_code, 404)

    # --- DELETE /{id} ---

    @patch("location.router.service.delete_location")
    @patch("location.router.service.get_location")
    def test_delete_location_200(self, mock_get, mock_delete):
        mock_get.return_value = _loc()
        resp = self.client.delete("/api/locations/1")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), {"message": "Location deleted"})
        mock_delete.assert_called_once()

    @patch("location.router.service.get_location")
    def test_delete_location_404_missing(self, mock_get):
        mock_get.return_value = None
        resp = self.client.delete("/api/locations/999")
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()
