"""Tests for the HTTP controller routes."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from specguard.controller.app import create_app
from specguard.models.config import BootstrapConfig


@pytest.fixture
def client(database_url: str, git_repo: Path):
    cfg = BootstrapConfig(database_url=database_url, repo_dir=str(git_repo))
    with TestClient(create_app(cfg)) as c:
        yield c


def _create(client: TestClient, **fields) -> dict:
    resp = client.post("/api/plans", json={"title": "Login", **fields})
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# Health and config
# ---------------------------------------------------------------------------


class TestHealth:
    def test_healthz(self, client) -> None:
        assert client.get("/healthz").json() == {"status": "ok"}

    def test_readyz(self, client) -> None:
        body = client.get("/readyz").json()
        assert body["status"] == "ready"
        assert body["checks"] == {"database": True}


class TestConfigRoutes:
    def test_models(self, client) -> None:
        ids = [m["id"] for m in client.get("/api/config/models").json()["models"]]
        assert "claude-sonnet-4-20250514" in ids

    def test_providers_unconfigured(self, client) -> None:
        providers = client.get("/api/config/providers").json()["providers"]
        assert {p["id"]: p["configured"] for p in providers} == {
            "anthropic": False,
            "gemini": False,
        }


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


class TestPlanRoutes:
    def test_crud(self, client) -> None:
        created = _create(client, in_scope=["auth"])
        assert created["status"] == "draft"

        assert client.get(f"/api/plans/{created['id']}").json()["in_scope"] == ["auth"]

        resp = client.patch(f"/api/plans/{created['id']}", json={"status": "active"})
        assert resp.json()["status"] == "active"
        assert [p["id"] for p in client.get("/api/plans?status=active").json()] == [created["id"]]

        assert client.delete(f"/api/plans/{created['id']}").status_code == 204
        assert client.get(f"/api/plans/{created['id']}").status_code == 404

    def test_validation_errors(self, client) -> None:
        assert client.post("/api/plans", json={"title": "  "}).status_code == 422
        created = _create(client)
        resp = client.patch(f"/api/plans/{created['id']}", json={"status": "archived"})
        assert resp.status_code == 422
        resp = client.patch(f"/api/plans/{created['id']}", json={"title": "   "})
        assert resp.status_code == 422

    def test_patch_drops_blank_scope_entries(self, client) -> None:
        created = _create(client)
        resp = client.patch(
            f"/api/plans/{created['id']}", json={"out_of_scope": ["", "billing"]}
        )
        assert resp.json()["out_of_scope"] == ["billing"]

    def test_missing_plan(self, client) -> None:
        assert client.patch("/api/plans/nope", json={"title": "x"}).status_code == 404
        assert client.delete("/api/plans/nope").status_code == 404
        assert client.post("/api/plans/nope/verify").status_code == 404

    def test_phases(self, client) -> None:
        created = _create(client)
        phase = client.post(f"/api/plans/{created['id']}/phases", json={"title": "Backend"}).json()

        resp = client.put(
            f"/api/plans/{created['id']}/phases/{phase['id']}/status",
            params={"status": "in_progress"},
        )
        assert resp.status_code == 200
        [stored] = client.get(f"/api/plans/{created['id']}").json()["phases"]
        assert stored["status"] == "in_progress"

        missing = client.put(
            f"/api/plans/{created['id']}/phases/nope/status", params={"status": "completed"}
        )
        assert missing.status_code == 404


# ---------------------------------------------------------------------------
# Verification and audit
# ---------------------------------------------------------------------------


class TestVerifyAndAudit:
    def test_audit_nothing_to_audit(self, client) -> None:
        assert client.get("/api/audit").status_code == 204

    def test_audit_changes(self, client, git_repo: Path) -> None:
        (git_repo / "src" / "app.py").write_text("print('hello')\nos.environ['X']\n")
        body = client.get("/api/audit").json()
        assert body["files"][0]["path"] == "src/app.py"
        assert body["risk"]["total"] == 5

    def test_verify(self, client, git_repo: Path) -> None:
        created = _create(client, out_of_scope=["src/app"])
        (git_repo / "src" / "app.py").write_text("print('bye')\n")

        report = client.post(f"/api/plans/{created['id']}/verify").json()
        assert report["risk"]["critical"] == 1
        assert report["risk"]["scope_violations"][0]["type"] == "out_of_scope"

    def test_verify_ai_unconfigured(self, client, git_repo: Path) -> None:
        created = _create(client)
        report = client.post(f"/api/plans/{created['id']}/verify", params={"use_ai": True}).json()
        assert "no model backend" in report["detector_error"]
