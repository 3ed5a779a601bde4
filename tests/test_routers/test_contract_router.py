import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from datetime import date, datetime, timezone
from fastapi.testclient import TestClient

from main import app
from core.database import get_db
from core.errors import ConflictError, NotFoundError, ValidationError
from authz.deps import get_current_actor, require_manager
from contract.schema import ActivationInfo, ActivationResult, ContractExpiryStatus, SweepResult


def _contract(**kw):
    data = dict(
        id=1,
        contract_number="HD-2026-001",
        contract_title="Vincom security",
        contract_type="service_contract",
        customer_id=4,
        start_date=date(2026, 1, 1),
        end_date=date(2026, 12, 31),
        status="draft",
        auto_generate_shifts=True,
        generate_shifts_advance_days=30,
        approved_at=None,
        approved_by=None,
        activated_at=None,
        activated_by=None,
        notes=None,
    )
    data.update(kw)
    return Obj(**data)


class FakeDB:
    def rollback(self): ...


def _fake_db():
    yield FakeDB()


class ContractRouterTests(unittest.TestCase):
    def setUp(self):
        app.dependency_overrides[get_db] = _fake_db
        app.dependency_overrides[get_current_actor] = lambda: Obj(id=42, role="manager")
        app.dependency_overrides[require_manager] = lambda: 42
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_current_actor, None)
        app.dependency_overrides.pop(require_manager, None)

    # ---------- ACTIVATE ----------
    @patch("contract.router.service.activate_contract")
    def test_activate_defaults_actor_from_header(self, mock_activate):
        mock_activate.return_value = ActivationResult(
            success=True,
            message="Contract HD-2026-001 activated successfully",
            activation_info=ActivationInfo(
                contract_id=1, contract_number="HD-2026-001", status="schedule_shifts",
                activated_at=datetime(2026, 1, 2, 3, 0, tzinfo=timezone.utc), activated_by=42,
                locations_count=1, schedules_count=1,
            ),
            event_published=True,
        )
        resp = self.client.post("/api/contracts/1/activate", json={"manager_id": 5, "notes": "go"})
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertTrue(body["event_published"])
        self.assertEqual(body["activation_info"]["status"], "schedule_shifts")

        args, kwargs = mock_activate.call_args
        self.assertEqual(args[1], 1)
        self.assertEqual(kwargs["activated_by"], 42)
        self.assertEqual(kwargs["manager_id"], 5)
        self.assertEqual(kwargs["notes"], "go")

    @patch("contract.router.service.activate_contract")
    def test_activate_without_body(self, mock_activate):
        mock_activate.return_value = ActivationResult(success=True, message="ok")
        resp = self.client.post("/api/contracts/1/activate")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(mock_activate.call_args[1]["activated_by"], 42)

    def test_activate_rejects_unknown_fields(self):
        resp = self.client.post("/api/contracts/1/activate", json={"status": "active"})
        self.assertEqual(resp.status_code, 422)

    @patch("contract.router.service.activate_contract")
    def test_activate_error_mapping(self, mock_activate):
        cases = [
            (NotFoundError("Contract 1 not found"), 404),
            (ConflictError("Contract HD-2026-001 is already active"), 409),
            (ValidationError(["Contract must have at least one location"]), 422),
        ]
        for exc, code in cases:
            mock_activate.side_effect = exc
            resp = self.client.post("/api/contracts/1/activate")
            self.assertEqual(resp.status_code, code, resp.text)
        self.assertEqual(resp.json()["detail"], ["Contract must have at least one location"])

    # ---------- READ ----------
    @patch("contract.router.service.get_contract")
    def test_get_contract(self, mock_get):
        mock_get.return_value = _contract()
        resp = self.client.get("/api/contracts/1")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["contract_number"], "HD-2026-001")

        mock_get.return_value = None
        resp = self.client.get("/api/contracts/2")
        self.assertEqual(resp.status_code, 404)

    @patch("contract.router.service.create_contract")
    def test_create_contract_stamps_creator(self, mock_create):
        mock_create.return_value = _contract()
        resp = self.client.post("/api/contracts", json={
            "contract_number": "HD-2026-001", "start_date": "2026-01-01", "end_date": "2026-12-31",
        })
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(mock_create.call_args[0][1].created_by, 42)

    # ---------- EXPIRATION ----------
    @patch("contract.router.expiration.run_sweep")
    def test_check_expired_runs_sweep(self, mock_sweep):
        mock_sweep.return_value = SweepResult(expired_count=2, managers_deactivated=1)
        resp = self.client.post("/api/contracts/check-expired")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["expired_count"], 2)
        self.assertIsNone(mock_sweep.call_args[1]["now"])

    @patch("contract.router.expiration.run_sweep")
    def test_check_expired_accepts_explicit_now(self, mock_sweep):
        mock_sweep.return_value = SweepResult()
        resp = self.client.post("/api/contracts/check-expired", json={"now": "2026-06-01T03:00:00Z"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(mock_sweep.call_args[1]["now"], datetime(2026, 6, 1, 3, 0, tzinfo=timezone.utc))

    def test_check_expired_rejects_naive_now(self):
        resp = self.client.post("/api/contracts/check-expired", json={"now": "2026-06-01T03:00:00"})
        self.assertEqual(resp.status_code, 422)

    @patch("contract.router.expiration.check_contract_expiry")
    def test_contract_expiry(self, mock_check):
        mock_check.return_value = ContractExpiryStatus(
            contract_id=1, contract_number="HD-2026-001", end_date=date(2026, 6, 5),
            days_remaining=4, status="near_expired",
        )
        resp = self.client.get("/api/contracts/1/expiry")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["status"], "near_expired")


class ContractRouterAuthTests(unittest.TestCase):
    def setUp(self):
        app.dependency_overrides[get_db] = _fake_db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)

    def test_missing_identity_is_401(self):
        resp = self.client.post("/api/contracts/1/activate")
        self.assertEqual(resp.status_code, 401)

    def test_guard_cannot_activate(self):
        resp = self.client.post("/api/contracts/1/activate", headers={"X-User-Id": "5", "X-User-Role": "guard"})
        self.assertEqual(resp.status_code, 403)

    @patch("contract.router.service.activate_contract")
    def test_manager_headers_reach_service(self, mock_activate):
        mock_activate.return_value = ActivationResult(success=True, message="ok")
        resp = self.client.post("/api/contracts/1/activate", headers={"X-User-Id": "5", "X-User-Role": "Manager"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(mock_activate.call_args[1]["activated_by"], 5)


if __name__ == "__main__":
    unittest.main()
