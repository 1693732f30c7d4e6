# dc_core/patients/tests/test_patient_api.py
from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from dc_core.appointments.models import Appointment
from dc_core.patients.models import BloodType, Gender, Patient
from dc_core.queue.models import QueueEntry

pytestmark = pytest.mark.django_db

URL = "/api/v1/patients/"


def _create(api_client, **overrides):
    body = {
        "first_name": "Liya",
        "last_name": "Haile",
        "gender": "Female",
        "date_of_birth": "1998-01-20",
        "phone_number": "+251922000000",
        "blood_type": "O+",
        "city": "Addis Ababa",
        "subcity": "Bole",
        "woreda": "03",
    }
    body.update(overrides)
    return api_client.post(URL, data=body, format="json")


def test_create_normalizes_form_values(api_client):
    resp = _create(api_client)

    assert resp.status_code == 201, resp.data
    data = resp.data["data"]
    assert data["gender"] == Gender.FEMALE
    assert data["blood_type"] == BloodType.O_POSITIVE
    assert data["full_name"] == "Liya Haile"


def test_create_accepts_stored_enum_values(api_client):
    resp = _create(api_client, gender="MALE", blood_type="AB_NEGATIVE")

    assert resp.status_code == 201, resp.data
    assert resp.data["data"]["blood_type"] == BloodType.AB_NEGATIVE


def test_unknown_blood_type_is_400(api_client):
    resp = _create(api_client, blood_type="C+")

    assert resp.status_code == 400
    assert "blood_type" in resp.data["details"]


def test_retrieve_and_patch(api_client, patient):
    resp = api_client.get(f"{URL}{patient.id}/")
    assert resp.status_code == 200
    assert resp.data["data"]["first_name"] == "Abebe"

    resp = api_client.patch(f"{URL}{patient.id}/", data={"email": "abebe@example.com"}, format="json")
    assert resp.status_code == 200
    assert resp.data["data"]["email"] == "abebe@example.com"

    patient.refresh_from_db()
    assert patient.email == "abebe@example.com"


def test_empty_patch_is_400(api_client, patient):
    resp = api_client.patch(f"{URL}{patient.id}/", data={}, format="json")

    assert resp.status_code == 400


def test_search_by_name_or_phone(api_client, patient, other_patient):
    resp = api_client.get(URL, {"q": "meron"})
    assert [r["id"] for r in resp.data["data"]["results"]] == [str(other_patient.id)]

    resp = api_client.get(URL, {"q": "911000"})
    assert [r["id"] for r in resp.data["data"]["results"]] == [str(patient.id)]


def test_delete_cascades_to_appointments_and_queue(api_client, patient, make_appointment):
    make_appointment(timezone.make_aware(datetime(2030, 3, 4, 9, 0)))
    QueueEntry.objects.create(patient=patient)

    resp = api_client.delete(f"{URL}{patient.id}/")

    assert resp.status_code == 200
    assert resp.data["message"] == "Patient deleted successfully"
    assert not Appointment.objects.exists()
    assert not QueueEntry.objects.exists()


def test_bulk_delete_returns_count(api_client, patient, other_patient):
    keep = Patient.objects.create(first_name="Keep", last_name="Me", gender="MALE", date_of_birth="2000-01-01")

    resp = api_client.post(
        f"{URL}bulk-delete/",
        data={"ids": [str(patient.id), str(other_patient.id)]},
        format="json",
    )

    assert resp.status_code == 200
    assert resp.data["data"] == {"deleted": 2}
    assert list(Patient.objects.values_list("id", flat=True)) == [keep.id]


def test_receptionist_cannot_bulk_delete(receptionist_client, patient):
    resp = receptionist_client.post(f"{URL}bulk-delete/", data={"ids": [str(patient.id)]}, format="json")

    assert resp.status_code == 403
    assert resp.data["code"] == "permission_denied"
    assert Patient.objects.filter(id=patient.id).exists()
