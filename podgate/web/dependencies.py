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
FastAPI dependency injection for podgate web server.

Usage:
    from fastapi import Depends
    from podgate.web.dependencies import AppState, get_app_state, require_token

    @router.get("/episodes", dependencies=[Depends(require_token)])
    async def list_episodes(state: AppState = Depends(get_app_state)):
        ...
"""

import secrets
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional
from urllib.parse import quote

from fastapi import Depends, Query, Request

from .responses import forbidden

if TYPE_CHECKING:
    from ..services import CatalogService
    from ..storage.audio_source import AudioSource
    from ..utils.config import Config


@dataclass
class AppState:
    """
    Application state container for dependency injection.

    Attributes:
        config: Application configuration
        audio_source: Local or hosted audio source
        catalog_service: Catalog resolution (owns the clock)
    """

    config: "Config"
    audio_source: "AudioSource"
    catalog_service: "CatalogService"


def get_app_state(request: Request) -> AppState:
    """FastAPI dependency to get the application state."""
    return request.app.state.app_state


def require_token(
    token: Optional[str] = Query(default=None),
    state: AppState = Depends(get_app_state),
) -> str:
    """
    FastAPI dependency that enforces the shared access token.

    The token is compared in constant time. The check runs before any
    lookup, so a 403 reveals nothing about the requested resource.

    Raises:
        HTTPException: 403 if the token is missing or wrong
    """
    expected = state.config.secret_token
    if token is None or not secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        forbidden()
    return token


class LinkBuilder:
    """
    Builds absolute, token-bearing links for a request.

    PUBLIC_BASE_URL wins over the request's own base URL, for deployments
    behind a proxy that rewrites the host.
    """

    def __init__(self, base_url: str, token: str):
        self.base_url = base_url.rstrip("/")
        self.token = token

    def _with_token(self, path: str) -> str:
        return f"{self.base_url}{path}?token={quote(self.token, safe='')}"

    def feed(self) -> str:
        return self._with_token("/feed.xml")

    def audio(self, filename: str) -> str:
        return self._with_token(f"/audio/{quote(filename, safe='')}")


def get_link_builder(
    request: Request,
    token: str = Depends(require_token),
    state: AppState = Depends(get_app_state),
) -> LinkBuilder:
    """FastAPI dependency that returns a LinkBuilder for authorized requests."""
    base_url = state.config.public_base_url or str(request.base_url)
    return LinkBuilder(base_url, token)
