# dc_core/appointments/tests/test_conflict_rules.py
from datetime import datetime, timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from dc_core.appointments.models import AppointmentStatus
from dc_core.appointments.selectors import find_conflicts, has_conflict

pytestmark = pytest.mark.django_db

NINE = timezone.make_aware(datetime(2030, 3, 4, 9, 0))


def _check(dentist, start, minutes=30, **kwargs):
    return has_conflict(
        dentist_id=dentist.id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        **kwargs,
    )


def test_partial_overlap_is_a_conflict(make_appointment, dentist):
    make_appointment(NINE, minutes=60)  # 09:00-10:00

    assert _check(dentist, NINE + timedelta(minutes=30), minutes=60)  # 09:30-10:30
    assert _check(dentist, NINE - timedelta(minutes=30), minutes=60)  # 08:30-09:30


def test_containment_both_ways_is_a_conflict(make_appointment, dentist):
    make_appointment(NINE, minutes=60)

    assert _check(dentist, NINE + timedelta(minutes=15), minutes=15)
    assert _check(dentist, NINE - timedelta(hours=1), minutes=180)


def test_touching_endpoints_do_not_conflict(make_appointment, dentist):
    make_appointment(NINE, minutes=60)

    assert not _check(dentist, NINE + timedelta(hours=1), minutes=30)  # starts at 10:00
    assert not _check(dentist, NINE - timedelta(minutes=30), minutes=30)  # ends at 09:00


@pytest.mark.parametrize(
    "status",
    [AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED, AppointmentStatus.NO_SHOW],
)
def test_inactive_appointments_do_not_hold_the_slot(make_appointment, dentist, status):
    make_appointment(NINE, minutes=60, status=status)

    assert not _check(dentist, NINE, minutes=60)


def test_confirmed_appointments_hold_the_slot(make_appointment, dentist):
    make_appointment(NINE, minutes=60, status=AppointmentStatus.CONFIRMED)

    assert _check(dentist, NINE, minutes=60)


def test_other_dentist_is_independent(make_appointment, dentist, other_dentist):
    make_appointment(NINE, minutes=60)

    assert not _check(other_dentist, NINE, minutes=60)


def test_excluded_appointment_is_ignored(make_appointment, dentist):
    appt = make_appointment(NINE, minutes=60)

    assert not _check(dentist, NINE + timedelta(minutes=10), minutes=60, exclude_appointment_id=appt.id)
    assert list(
        find_conflicts(
            dentist_id=dentist.id,
            start_time=NINE,
            end_time=NINE + timedelta(hours=1),
        ).values_list("id", flat=True)
    ) == [appt.id]


def test_no_dentist_means_no_conflict(make_appointment):
    make_appointment(NINE, minutes=60)

    assert has_conflict(dentist_id=None, start_time=NINE, end_time=NINE + timedelta(hours=1)) is False


def test_empty_interval_is_rejected(dentist):
    with pytest.raises(ValidationError):
        has_conflict(dentist_id=dentist.id, start_time=NINE, end_time=NINE)
