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

"""
Response helpers for podgate web API.

Error bodies are uniform: a forbidden request never says
whether the resource exists, and an embargoed episode is indistinguishable
from a missing one.
"""

from datetime import datetime, timezone
from typing import Any, Dict, NoReturn

from fastapi import HTTPException


def api_response(data: Dict[str, Any], status: str = "ok") -> Dict[str, Any]:
    """
    Wrap data in standard API response envelope.

    Args:
        data: Response data to include
        status: Status string (default "ok")

    Returns:
        Dict with status, timestamp, and spread data fields

    Example:
        >>> api_response({"episodes": []})
        {"status": "ok", "timestamp": "2026-01-13T...", "episodes": []}
    """
    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **data,
    }


# =============================================================================
# HTTP Error Helpers
# =============================================================================


def not_found(resource: str = "Episode") -> NoReturn:
    """
    Raise 404 Not Found.

    The identifier is not echoed back.

    Raises:
        HTTPException: Always raises 404
    """
    raise HTTPException(status_code=404, detail=f"{resource} not found")


def bad_request(message: str) -> NoReturn:
    """
    Raise 400 Bad Request.

    Raises:
        HTTPException: Always raises 400
    """
    raise HTTPException(status_code=400, detail=message)


def forbidden() -> NoReturn:
    """
    Raise 403 Forbidden for a missing or wrong token.

    Raises:
        HTTPException: Always raises 403
    """
    raise HTTPException(status_code=403, detail="Invalid token")
