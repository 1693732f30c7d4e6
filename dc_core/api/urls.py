# dc_core/api/urls.py
from __future__ import annotations

from rest_framework.routers import DefaultRouter

from dc_core.appointments.api.views import AppointmentViewSet
from dc_core.notifications.api.views import NotificationViewSet
from dc_core.patients.api.views import PatientViewSet
from dc_core.queue.api.views import QueueViewSet
from dc_core.staff.api.views import StaffViewSet

router = DefaultRouter()

router.register(r"staff", StaffViewSet, basename="staff")
router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"appointments", AppointmentViewSet, basename="appointments")
router.register(r"queue", QueueViewSet, basename="queue")
router.register(r"notifications", NotificationViewSet, basename="notifications")

urlpatterns = router.urls
