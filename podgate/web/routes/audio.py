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
Audio streaming endpoint.

GET|HEAD /audio/{filename}?token=<secret>

- 403 when the token is wrong (checked first)
- 400 when the extension is not a supported audio type
- 404 when the file is missing or not yet released (indistinguishable)
- 200 with the file bytes for local files
- 307 to the CDN URL for hosted assets
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, RedirectResponse, Response

from ...core.audio_formats import content_type_for
from ..dependencies import AppState, get_app_state, require_token
from ..responses import bad_request, not_found

router = APIRouter()


@router.api_route("/{filename}", methods=["GET", "HEAD"], dependencies=[Depends(require_token)])
async def get_audio(
    filename: str,
    state: AppState = Depends(get_app_state),
) -> Response:
    """
    Stream one released audio file.

    Args:
        filename: Exact audio filename

    Returns:
        File stream or redirect to the hosted copy.
    """
    content_type = content_type_for(filename)
    if content_type is None:
        bad_request("Unsupported file type")

    asset = await state.catalog_service.find_released_asset(filename)
    if asset is None:
        not_found()

    if asset.local_path is not None:
        return FileResponse(asset.local_path, media_type=content_type)
    if asset.url:
        return RedirectResponse(asset.url, status_code=307)
    not_found()
