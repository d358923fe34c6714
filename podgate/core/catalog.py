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
Catalog assembly for the feed and the episode listing.

Candidate filenames come from an AudioSource. Unsupported extensions are
skipped, each remaining file is resolved to an Episode, unreleased episodes
are dropped, and the rest are sorted newest first and enriched with the
size, URL and content type the caller needs.

Ordering: release date descending; undated episodes sort as the oldest;
ties are broken by filename ascending.
"""

from datetime import date, datetime
from typing import Callable, Iterable, List, Union

from structlog import get_logger

from ..models.episode import CatalogEntry, Episode, MetadataDocument
from ..storage.audio_source import AudioSource
from .audio_formats import check_declared_type, content_type_for, is_supported
from .episodes import is_released, resolve_episode

logger = get_logger(__name__)

UrlBuilder = Callable[[str], str]


def sort_episodes(episodes: Iterable[Episode]) -> List[Episode]:
    """Sort newest first; undated last; same date by filename."""
    by_name = sorted(episodes, key=lambda episode: episode.filename)
    return sorted(by_name, key=lambda episode: episode.release_date or date.min, reverse=True)


def resolve_supported(filenames: Iterable[str], metadata: MetadataDocument) -> List[Episode]:
    """
    Resolve every supported filename, released or not, in catalog order.

    Args:
        filenames: Candidate filenames from an audio source
        metadata: Parsed metadata document

    Returns:
        Sorted episodes for supported files
    """
    episodes = []
    for filename in filenames:
        if not is_supported(filename):
            logger.debug("file_skipped", filename=filename, reason="unsupported extension")
            continue
        episodes.append(resolve_episode(filename, metadata))
    return sort_episodes(episodes)


def select_released(
    filenames: Iterable[str],
    metadata: MetadataDocument,
    now: Union[date, datetime],
) -> List[Episode]:
    """
    Resolve, gate and sort candidate filenames.

    Args:
        filenames: Candidate filenames from an audio source
        metadata: Parsed metadata document
        now: Current date or datetime

    Returns:
        Released episodes, newest first
    """
    return [episode for episode in resolve_supported(filenames, metadata) if is_released(episode.release_date, now)]


async def assemble_catalog(
    source: AudioSource,
    metadata: MetadataDocument,
    now: Union[date, datetime],
    url_for: UrlBuilder,
) -> List[CatalogEntry]:
    """
    Build the released, sorted catalog with size, URL and content type.

    Assets with their own URL (hosted) keep it; local assets get
    ``url_for(filename)``. Any asset that yields no usable URL is skipped.

    Args:
        source: Audio source to enumerate
        metadata: Parsed metadata document
        now: Current date or datetime for the release gate
        url_for: Builds the served URL for a local file

    Returns:
        Catalog entries, newest first
    """
    assets = {asset.filename: asset for asset in await source.list_assets()}
    released = select_released(assets, metadata, now)

    entries = []
    for episode in released:
        asset = assets[episode.filename]

        if asset.url:
            url = asset.url
        elif asset.local_path is not None:
            url = url_for(asset.filename)
        else:
            logger.warning("episode_skipped", filename=episode.filename, reason="no usable url")
            continue

        content_type = content_type_for(episode.filename)
        check_declared_type(episode.filename, content_type, await source.sniffed_types(asset))

        entries.append(
            CatalogEntry(
                episode=episode,
                url=url,
                size=asset.size,
                content_type=content_type,
                modified_time=asset.modified_time,
            )
        )

    logger.debug("catalog_assembled", candidates=len(assets), released=len(entries))
    return entries
