# Copyright 2025 podgate
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""HTTP request/response logging middleware for FastAPI."""

import time
import uuid
from typing import Any, Callable, Dict

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

AUDIO_PATH_PREFIX = "/audio/"


def request_log_fields(request: Request) -> Dict[str, Any]:
    """
    Context bound for one request.

    The query string is never included because it carries the access
    token; only whether a token was supplied is recorded. Audio requests
    also record the requested filename.
    """
    path = request.url.path
    fields: Dict[str, Any] = {
        "method": request.method,
        "endpoint": path,
        "client_ip": request.client.host if request.client else "unknown",
        "token_supplied": "token" in request.query_params,
    }
    if path.startswith(AUDIO_PATH_PREFIX):
        fields["audio_file"] = path[len(AUDIO_PATH_PREFIX):]
    return fields


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.

    This middleware:
    - Generates a unique request_id for each request
    - Binds the request fields from request_log_fields()
    - Logs request completion with status code and duration
    - Adds X-Request-ID header to responses
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]

        # Bound context is merged into every log line emitted while handling this request
        structlog.contextvars.bind_contextvars(request_id=request_id, **request_log_fields(request))

        start_time = time.time()
        logger.info("http_request_started")

        try:
            response = await call_next(request)

            duration_ms = (time.time() - start_time) * 1000
            log_level = "info" if response.status_code < 400 else "warning" if response.status_code < 500 else "error"
            getattr(logger, log_level)(
                "http_request_completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "http_request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(duration_ms, 2),
                exc_info=True,
            )
            raise

        finally:
            structlog.contextvars.clear_contextvars()
