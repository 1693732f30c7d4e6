# dc_core/common/tests/test_api_envelope.py
import uuid
from unittest import mock

import pytest
from django.db import DatabaseError
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


def test_success_envelope_and_request_id_header(api_client):
    resp = api_client.get("/api/v1/patients/")

    assert resp.status_code == 200
    assert resp.data["success"] is True
    assert resp.data["data"]["results"] == []
    assert resp["X-Request-Id"]


def test_inbound_request_id_is_echoed_in_error(api_client):
    resp = api_client.get(f"/api/v1/patients/{uuid.uuid4()}/", HTTP_X_REQUEST_ID="trace-123")

    assert resp.status_code == 404
    assert resp["X-Request-Id"] == "trace-123"
    assert resp.data == {
        "success": False,
        "error": "Patient not found.",
        "code": "not_found",
        "details": None,
        "request_id": "trace-123",
    }


def test_unsafe_inbound_request_id_is_replaced(api_client):
    resp = api_client.get("/api/v1/patients/", HTTP_X_REQUEST_ID="bad id\nwith newline")

    assert resp["X-Request-Id"] != "bad id\nwith newline"


def test_validation_error_envelope(api_client):
    resp = api_client.post("/api/v1/patients/", data={"first_name": "Only"}, format="json")

    assert resp.status_code == 400
    assert resp.data["success"] is False
    assert resp.data["code"] == "validation_error"
    assert resp.data["error"] == "Invalid data provided."
    assert "last_name" in resp.data["details"]


def test_unauthenticated_request_is_rejected():
    resp = APIClient().get("/api/v1/patients/")

    assert resp.status_code in (401, 403)
    assert resp.data["success"] is False


def test_database_failure_is_a_generic_500(api_client):
    with mock.patch(
        "dc_core.patients.api.views.search_patients",
        side_effect=DatabaseError("relation does not exist"),
    ):
        resp = api_client.get("/api/v1/patients/")

    assert resp.status_code == 500
    assert resp.data["code"] == "persistence_error"
    assert resp.data["error"] == "Request failed."
    assert "relation" not in str(resp.data)


def test_api_alias_prefix(api_client):
    assert api_client.get("/api/patients/").status_code == 200
