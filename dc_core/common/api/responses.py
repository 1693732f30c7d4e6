# dc_core/common/api/responses.py
from __future__ import annotations

from typing import Any

from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(data: Any = None, *, status: int = http_status.HTTP_200_OK, **extra: Any) -> Response:
    """
    Success half of the API result shape: {"success": true, "data": ...}.
    """
    body = {"success": True, "data": data}
    body.update(extra)
    return Response(body, status=status)
