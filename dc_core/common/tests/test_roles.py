# dc_core/common/tests/test_roles.py
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management import call_command

from dc_core.common.permissions import ALL_ROLES, _user_roles

pytestmark = pytest.mark.django_db


def test_ensure_roles_is_idempotent():
    call_command("ensure_roles")
    call_command("ensure_roles")

    assert sorted(Group.objects.values_list("name", flat=True)) == sorted(ALL_ROLES)


def test_superuser_is_admin():
    su = get_user_model().objects.create_superuser(username="root", password="x", email="root@x.test")

    assert _user_roles(su) == {"ADMIN"}


def test_unknown_groups_are_ignored(user):
    user.groups.add(Group.objects.create(name="VISITOR"))

    assert _user_roles(user) == {"ADMIN"}


def test_inactive_staff_profile_grants_nothing(receptionist):
    u = get_user_model().objects.create_user(username="hana", password="x")
    receptionist.user_id = u.id
    receptionist.is_active = False
    receptionist.save()

    assert _user_roles(u) == set()
