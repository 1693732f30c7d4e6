# dc_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Failure half of the API result shape:
      {"success": false, "error": <message>, "code": ..., "details": ..., "request_id": ...}
    The dashboard branches on "success" and shows "error" to the user.
    """
    rid = ensure_request_id(request)
    return {
        "success": False,
        "error": message,
        "code": code,
        "details": details,
        "request_id": rid,
    }


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Use when business rules block an action (double-booking, duplicate queue entry).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class PersistenceError(APIException):
    """
    Store failure surfaced to the client without internals.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Request failed."
    default_code = "persistence_error"


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, (Http404, NotFound)):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def _validation_details(exc: DjangoValidationError) -> Any:
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return {"detail": exc.messages}


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    view = context.get("view")

    # Service-layer errors that escaped the view mapping.
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(detail=_validation_details(exc))
    elif isinstance(exc, ObjectDoesNotExist):
        exc = NotFound(str(exc) or "Not found.")
    elif isinstance(exc, DatabaseError):
        logger.exception(
            "Persistence failure in %s (request_id=%s)",
            view.__class__.__name__ if view is not None else "unknown view",
            ensure_request_id(request),
        )
        exc = PersistenceError()

    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception("Unhandled error (request_id=%s)", ensure_request_id(request), exc_info=exc)
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)

    # DRF standardizes errors into response.data
    data = response.data

    # Message + details rules:
    # 1) If {"detail": "..."} only -> message=detail, details=None
    # 2) If {"detail": "...", ...} -> message=detail, details={...without detail}
    # 3) Otherwise -> message="Invalid data provided." for 400s, "Request failed." else; details=data
    message = "Invalid data provided." if http_status == status.HTTP_400_BAD_REQUEST else "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        maybe_msg = data.get("detail")
        if isinstance(maybe_msg, (list, tuple)) and maybe_msg:
            maybe_msg = maybe_msg[0]
        message = str(maybe_msg)
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None
    elif isinstance(data, list) and data:
        message = str(data[0])
        details = None

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )


def as_drf_validation_error(exc: DjangoValidationError) -> ValidationError:
    """
    Service-layer ValidationError -> DRF ValidationError, keeping field keys.
    """
    return ValidationError(detail=_validation_details(exc))
