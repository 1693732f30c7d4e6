from __future__ import annotations

import logging
import re
import time

from django.utils.deprecation import MiddlewareMixin

from dc_core.common.api.exceptions import REQUEST_ID_HEADER, ensure_request_id

logger = logging.getLogger(__name__)

_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdMiddleware(MiddlewareMixin):
    """
    Tags every request with a request_id.

    Behavior:
      - Honours an inbound X-Request-Id when it is short and header-safe.
      - Otherwise generates one (same generator the error envelope uses).
      - Echoes it back on the response and logs API calls with status + duration.
    """

    META_KEY = "HTTP_X_REQUEST_ID"
    LOGGED_PREFIXES = ("/api/",)

    def process_request(self, request):
        inbound = request.META.get(self.META_KEY, "")
        if inbound and _SAFE_REQUEST_ID.match(inbound):
            request.request_id = inbound
        else:
            request.request_id = None
            ensure_request_id(request)
        request._dc_started = time.monotonic()
        return None

    def process_response(self, request, response):
        rid = ensure_request_id(request)
        response[REQUEST_ID_HEADER] = rid

        path = getattr(request, "path", "") or ""
        if any(path.startswith(p) for p in self.LOGGED_PREFIXES):
            started = getattr(request, "_dc_started", None)
            elapsed_ms = (time.monotonic() - started) * 1000 if started else 0.0
            logger.info(
                "%s %s -> %s (%.1f ms) request_id=%s",
                request.method,
                path,
                response.status_code,
                elapsed_ms,
                rid,
            )
        return response
