# ============================================================================
# FILE: test/api_layer/test_request_endpoints.py
# Read-only ledger endpoints with the ledger service patched
# ============================================================================

import pytest
from datetime import datetime, timezone
from unittest.mock import patch

from db.models.requests import RequestModel
from claim_worker.exceptions import ResourceNotFoundError, ValidationError, DatabaseError

LEDGER = "claim_worker.services.ledger_service"


def _request(request_id, status="new", kind="primary", target_id="sheet-1"):
    return RequestModel(
        id=request_id,
        status=status,
        kind=kind,
        target_id=target_id,
        payload={"n": request_id},
        created_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        updated_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


class TestGetRequest:

    def test_found(self, client):
        with patch(f"{LEDGER}.get_request", return_value=_request(7, status="complete")):
            response = client.get("/requests/7")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["id"] == 7
        assert body["data"]["status"] == "complete"
        assert body["data"]["payload"] == {"n": 7}
        assert body["data"]["created_at"].startswith("2026-01-02T03:04:05")

    def test_not_found_is_404(self, client):
        error = ResourceNotFoundError("Request 9 not found", resource_type="request", resource_id="9")
        with patch(f"{LEDGER}.get_request", side_effect=error):
            response = client.get("/requests/9")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["type"] == "ResourceNotFoundError"
        assert body["trace_id"] == response.headers["X-Trace-ID"]

    def test_non_integer_id_rejected(self, client):
        response = client.get("/requests/abc")
        assert response.status_code == 422


class TestListRequests:

    def test_lists_with_filters(self, client):
        rows = [_request(1), _request(2)]
        with patch(f"{LEDGER}.list_requests", return_value=rows) as mock_list:
            response = client.get("/requests?status=new&target_id=sheet-1&limit=2")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [item["id"] for item in data["items"]] == [1, 2]
        assert data["count"] == 2
        assert data["next_after_id"] == 2
        kwargs = mock_list.call_args.kwargs
        assert kwargs["status"] == "new"
        assert kwargs["target_id"] == "sheet-1"
        assert kwargs["limit"] == 2

    def test_short_page_has_no_next(self, client):
        with patch(f"{LEDGER}.list_requests", return_value=[_request(1)]):
            response = client.get("/requests?limit=10")

        assert response.json()["data"]["next_after_id"] is None

    def test_validation_error_is_422(self, client):
        error = ValidationError("limit must be between 1 and 500", field="limit", value=0)
        with patch(f"{LEDGER}.list_requests", side_effect=error):
            response = client.get("/requests?limit=0")

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "limit"

    def test_database_error_is_500_without_internals(self, client):
        error = DatabaseError("Database error in list_requests", original_exception=RuntimeError("secret"))
        with patch(f"{LEDGER}.list_requests", side_effect=error):
            response = client.get("/requests")

        assert response.status_code == 500
        assert "original_error" not in response.json()["error"].get("details", {})


class TestLedgerStats:

    def test_stats(self, client):
        stats = {"by_status": {"new": 1, "in_progress": 0, "complete": 4, "error": 0}, "total": 5}
        with patch(f"{LEDGER}.get_ledger_stats", return_value=stats):
            response = client.get("/requests/stats")

        assert response.status_code == 200
        assert response.json()["data"] == stats
