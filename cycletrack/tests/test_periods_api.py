"""HTTP tests for the period routes, auth middleware, and error mapping."""

from __future__ import annotations

from typing import Callable
from uuid import uuid4

import jwt as pyjwt
import pytest
from fastapi.testclient import TestClient

from cycletrack.config import Settings
from cycletrack.main import create_app
from cycletrack.tests.conftest import OTHER_USER_ID

BASE = "/api/v1/periods"


def _create(client: TestClient, headers: dict, start: str, end: str, **extra) -> dict:
    response = client.post(BASE, json={"startDate": start, "endDate": end, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuth:
    def test_missing_token(self, client: TestClient) -> None:
        response = client.get(BASE)
        assert response.status_code == 401
        assert response.json() == {"detail": "Access token required"}

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid token"}

    def test_token_signed_with_other_secret(self, client: TestClient) -> None:
        token = pyjwt.encode({"userId": "intruder"}, "wrong-secret", algorithm="HS256")
        response = client.get(BASE, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_expired_token(
        self, client: TestClient, make_token: Callable[..., str]
    ) -> None:
        token = make_token(exp=1)
        response = client.get(BASE, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json() == {"detail": "Token expired"}

    def test_cookie_token(self, client: TestClient, make_token: Callable[..., str]) -> None:
        response = client.get(BASE, headers={"Cookie": f"accessToken={make_token()}"})
        assert response.status_code == 200

    def test_health_is_public(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["storage"] == "connected"


class TestEntryRoutes:
    def test_create_returns_camel_case_entry(
        self, client: TestClient, auth_headers: dict
    ) -> None:
        body = _create(
            client, auth_headers, "2024-01-01", "2024-01-05",
            flow="light", symptoms=["cramps", "bloating"], notes="  tired  ",
        )
        assert body["startDate"] == "2024-01-01"
        assert body["endDate"] == "2024-01-05"
        assert body["periodDuration"] == 5
        assert body["flow"] == "light"
        assert body["symptoms"] == ["cramps", "bloating"]
        assert body["notes"] == "tired"
        assert "id" in body and "userId" in body

    def test_snake_case_input_is_accepted(
        self, client: TestClient, auth_headers: dict
    ) -> None:
        response = client.post(
            BASE,
            json={"start_date": "2024-01-01", "end_date": "2024-01-02"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["periodDuration"] == 2

    def test_overlap_returns_409(self, client: TestClient, auth_headers: dict) -> None:
        _create(client, auth_headers, "2024-01-01", "2024-01-05")
        response = client.post(
            BASE, json={"startDate": "2024-01-05", "endDate": "2024-01-08"}, headers=auth_headers
        )
        assert response.status_code == 409
        assert response.json() == {"detail": "Period entry overlaps with existing entry"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"startDate": "2024-01-05", "endDate": "2024-01-01"},
            {"startDate": "not-a-date", "endDate": "2024-01-01"},
            {"startDate": "2024-01-01", "endDate": "2024-01-03", "flow": "torrential"},
            {"startDate": "2024-01-01", "endDate": "2024-01-03", "symptoms": ["hiccups"]},
            {"startDate": "2024-01-01", "endDate": "2024-01-03", "notes": "x" * 501},
            {"startDate": "2024-01-01", "endDate": "2024-01-15"},
        ],
    )
    def test_invalid_payloads_return_422(
        self, client: TestClient, auth_headers: dict, payload: dict
    ) -> None:
        response = client.post(BASE, json=payload, headers=auth_headers)
        assert response.status_code == 422

    def test_get_update_delete(self, client: TestClient, auth_headers: dict) -> None:
        created = _create(client, auth_headers, "2024-01-01", "2024-01-05")
        url = f"{BASE}/{created['id']}"

        assert client.get(url, headers=auth_headers).json()["id"] == created["id"]

        patched = client.patch(url, json={"endDate": "2024-01-03"}, headers=auth_headers)
        assert patched.status_code == 200
        assert patched.json()["periodDuration"] == 3

        replaced = client.put(
            url,
            json={"startDate": "2024-01-02", "endDate": "2024-01-07", "flow": "heavy"},
            headers=auth_headers,
        )
        assert replaced.status_code == 200
        assert replaced.json()["periodDuration"] == 6
        assert replaced.json()["flow"] == "heavy"

        assert client.delete(url, headers=auth_headers).status_code == 204
        assert client.get(url, headers=auth_headers).status_code == 404

    def test_empty_patch_is_rejected(self, client: TestClient, auth_headers: dict) -> None:
        created = _create(client, auth_headers, "2024-01-01", "2024-01-05")
        response = client.patch(f"{BASE}/{created['id']}", json={}, headers=auth_headers)
        assert response.status_code == 422
        assert response.json() == {"detail": "No fields to update"}

    def test_entries_are_private_to_their_owner(
        self, client: TestClient, auth_headers: dict, make_token: Callable[..., str]
    ) -> None:
        created = _create(client, auth_headers, "2024-01-01", "2024-01-05")
        other = {"Authorization": f"Bearer {make_token(OTHER_USER_ID)}"}
        url = f"{BASE}/{created['id']}"

        assert client.get(url, headers=other).status_code == 404
        assert client.patch(url, json={"flow": "heavy"}, headers=other).status_code == 404
        assert client.delete(url, headers=other).status_code == 404
        assert client.get(BASE, headers=other).json()["pagination"]["total"] == 0
        # Same range is free for a different user
        _create(client, other, "2024-01-01", "2024-01-05")

    def test_unknown_id(self, client: TestClient, auth_headers: dict) -> None:
        response = client.get(f"{BASE}/{uuid4()}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"detail": "Period entry not found"}

    def test_list_pagination(self, client: TestClient, auth_headers: dict) -> None:
        for month in range(1, 6):
            _create(client, auth_headers, f"2024-0{month}-01", f"2024-0{month}-03")

        body = client.get(BASE, params={"page": 2, "limit": 2}, headers=auth_headers).json()
        assert [e["startDate"] for e in body["data"]] == ["2024-03-01", "2024-02-01"]
        assert body["pagination"] == {"current": 2, "pages": 3, "total": 5}

    def test_list_uses_default_page_size(self, client: TestClient, auth_headers: dict) -> None:
        for month in range(1, 10):
            _create(client, auth_headers, f"2024-0{month}-01", f"2024-0{month}-03")
        for month in range(10, 13):
            _create(client, auth_headers, f"2024-{month}-01", f"2024-{month}-03")

        body = client.get(BASE, headers=auth_headers).json()
        assert len(body["data"]) == 10
        assert body["pagination"] == {"current": 1, "pages": 2, "total": 12}


class TestInsightsRoute:
    def test_insufficient_data(self, client: TestClient, auth_headers: dict) -> None:
        _create(client, auth_headers, "2024-01-01", "2024-01-05")
        body = client.get(f"{BASE}/insights", headers=auth_headers).json()

        assert body["cycleRegularity"] == "insufficient_data"
        assert body["averageCycleLength"] is None
        assert body["averagePeriodDuration"] is None
        assert body["nextPredictedPeriod"] is None
        assert body["insights"] == ["Add more period entries to get cycle insights"]

    def test_report(self, client: TestClient, auth_headers: dict) -> None:
        _create(client, auth_headers, "2024-01-01", "2024-01-05", symptoms=["cramps"])
        _create(client, auth_headers, "2024-01-29", "2024-02-02")

        body = client.get(f"{BASE}/insights", headers=auth_headers).json()
        assert body["cycleLengths"] == [28]
        assert body["periodDurations"] == [5, 5]
        assert body["averageCycleLength"] == 28
        assert body["averagePeriodDuration"] == 5
        assert body["nextPredictedPeriod"] == "2024-02-26"
        assert body["cycleRegularity"] == "regular"
        assert body["totalCycles"] == 2
        assert body["ovulationDay"] == 14
        assert body["fertileWindow"] == {"startDay": 14, "endDay": 18}
        assert body["currentPhase"] == "luteal"
        assert len(body["tips"]) == 7


class TestErrorMapping:
    def test_storage_failure_is_opaque(
        self, settings: Settings, auth_headers: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        leaked = "connection to db.internal:5432 failed: password=hunter2"

        async def broken_latest(*args, **kwargs):
            raise RuntimeError(leaked)

        with TestClient(create_app(settings), raise_server_exceptions=False) as client:
            repository = client.app.state.entry_store.repository
            monkeypatch.setattr(repository, "latest", broken_latest)
            response = client.get(BASE, headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
        assert "hunter2" not in response.text
        assert "db.internal" not in response.text


class TestAppSettings:
    def test_app_name_sets_the_api_title(self, settings: Settings) -> None:
        named = settings.model_copy(update={"app_name": "Luna"})
        with TestClient(create_app(named)) as client:
            response = client.get("/openapi.json")
        assert response.status_code == 200
        assert response.json()["info"]["title"] == "Luna API"

    def test_debug_flag_reaches_the_app(self, settings: Settings) -> None:
        assert create_app(settings.model_copy(update={"debug": True})).debug is True
        assert create_app(settings).debug is False
