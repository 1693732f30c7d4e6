# dc_core/conftest.py
from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from dc_core.common.events import EventBus
from dc_core.patients.models import Patient
from dc_core.staff.models import Staff, StaffRole


def _user_with_group(username: str, group: str):
    User = get_user_model()
    user = User.objects.create_user(username=username, password="testpass", is_active=True)
    g, _ = Group.objects.get_or_create(name=group)
    user.groups.add(g)
    return user


@pytest.fixture
def user(db):
    """
    Test user in the ADMIN group.
    """
    return _user_with_group("testuser", "ADMIN")


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def receptionist_client(db):
    c = APIClient()
    c.force_authenticate(user=_user_with_group("frontdesk", "RECEPTIONIST"))
    return c


@pytest.fixture
def bus():
    """
    Isolated bus so tests can observe published events without the app subscribers.
    """
    return EventBus()


@pytest.fixture
def dentist(db):
    return Staff.objects.create(
        first_name="Sara",
        last_name="Bekele",
        email="sara@clinic.test",
        role=StaffRole.DENTIST,
    )


@pytest.fixture
def other_dentist(db):
    return Staff.objects.create(
        first_name="Dawit",
        last_name="Alemu",
        email="dawit@clinic.test",
        role=StaffRole.DENTIST,
    )


@pytest.fixture
def receptionist(db):
    return Staff.objects.create(
        first_name="Hana",
        last_name="Tesfaye",
        email="hana@clinic.test",
        role=StaffRole.RECEPTIONIST,
    )


@pytest.fixture
def patient(db):
    return Patient.objects.create(
        first_name="Abebe",
        last_name="Kebede",
        gender="MALE",
        date_of_birth="1990-04-12",
        phone_number="+251911000000",
    )


@pytest.fixture
def other_patient(db):
    return Patient.objects.create(
        first_name="Meron",
        last_name="Girma",
        gender="FEMALE",
        date_of_birth="1985-09-30",
    )


@pytest.fixture
def make_appointment(db, patient, dentist):
    """
    Direct row factory (skips the booking rule) for arranging fixtures.
    """
    from dc_core.appointments.models import Appointment

    def _make(start, minutes=30, **kwargs):
        kwargs.setdefault("patient", patient)
        kwargs.setdefault("dentist", dentist)
        return Appointment.objects.create(
            start_time=start,
            end_time=start + timedelta(minutes=minutes),
            **kwargs,
        )

    return _make
