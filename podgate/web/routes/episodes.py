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
Episode listing endpoint.

GET /episodes?token=<secret> mirrors the feed as JSON: the same released,
sorted collection plus the podcast block.
"""

from fastapi import APIRouter, Depends

from ..dependencies import AppState, LinkBuilder, get_app_state, get_link_builder
from ..responses import api_response

router = APIRouter()


@router.get("/episodes")
async def list_episodes(
    state: AppState = Depends(get_app_state),
    links: LinkBuilder = Depends(get_link_builder),
) -> dict:
    """
    List released episodes with resolved metadata.

    Returns:
        Podcast metadata and episodes, newest first.
    """
    podcast, entries = await state.catalog_service.released_catalog(links.audio)

    return api_response(
        {
            "podcast": podcast.model_dump(),
            "episodes": [entry.to_dict() for entry in entries],
        }
    )
