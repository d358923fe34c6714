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
RSS feed endpoint.

GET /feed.xml?token=<secret> renders every released episode, newest first.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from structlog import get_logger

from ...core.feed_builder import build_feed
from ..dependencies import AppState, LinkBuilder, get_app_state, get_link_builder

logger = get_logger(__name__)

router = APIRouter()

RSS_MEDIA_TYPE = "application/rss+xml; charset=utf-8"


@router.get("/feed.xml")
async def get_feed(
    state: AppState = Depends(get_app_state),
    links: LinkBuilder = Depends(get_link_builder),
) -> Response:
    """
    Render the podcast feed.

    Returns:
        RSS 2.0 document with iTunes tags.
    """
    service = state.catalog_service
    podcast, entries = await service.released_catalog(links.audio)

    xml = build_feed(
        podcast,
        entries,
        base_url=links.base_url,
        feed_url=links.feed(),
        ttl=state.config.feed_ttl,
        now=service.clock(),
    )

    logger.info("feed_served", episodes=len(entries))
    return Response(content=xml, media_type=RSS_MEDIA_TYPE)
