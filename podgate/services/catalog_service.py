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
Catalog service - the episode operations shared by the web API and the CLI.

Every call re-reads the metadata document and the audio source, so there
is no state to invalidate between requests.
"""

from datetime import datetime
from typing import Callable, List, Optional, Tuple

from structlog import get_logger

from ..core.audio_formats import is_supported
from ..core.catalog import UrlBuilder, assemble_catalog, resolve_supported
from ..core.episodes import is_released, parse_filename, resolve_podcast_info
from ..core.metadata_loader import load_metadata
from ..models.episode import AudioAsset, CatalogEntry, Episode, MetadataDocument, PodcastInfo
from ..storage.audio_source import AudioSource
from ..utils.config import Config

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class CatalogService:
    """
    Resolves the released catalog for the current moment.

    Args:
        config: Application configuration
        audio_source: Where audio files are listed from
        clock: Returns "now"; injectable so tests can freeze time
    """

    def __init__(self, config: Config, audio_source: AudioSource, clock: Clock = datetime.now):
        self.config = config
        self.audio_source = audio_source
        self.clock = clock

    async def load_metadata(self) -> MetadataDocument:
        return await load_metadata(self.config.metadata_path)

    async def released_catalog(self, url_for: UrlBuilder) -> Tuple[PodcastInfo, List[CatalogEntry]]:
        """
        Podcast info and released episodes, newest first.

        Args:
            url_for: Builds the served URL for a local file

        Returns:
            Tuple of (podcast info, catalog entries)
        """
        metadata = await self.load_metadata()
        entries = await assemble_catalog(self.audio_source, metadata, self.clock(), url_for)
        return resolve_podcast_info(metadata), entries

    async def schedule(self) -> List[Tuple[Episode, bool]]:
        """
        Every supported episode with its release state, in catalog order.

        Used by operators to check upcoming releases; never exposed over HTTP.
        """
        metadata = await self.load_metadata()
        assets = await self.audio_source.list_assets()
        now = self.clock()
        episodes = resolve_supported((asset.filename for asset in assets), metadata)
        return [(episode, is_released(episode.release_date, now)) for episode in episodes]

    async def find_released_asset(self, filename: str) -> Optional[AudioAsset]:
        """
        Look up a servable audio file.

        An unreleased file is reported exactly like a missing one.

        Args:
            filename: Requested filename (must have a supported extension)

        Returns:
            The asset, or None if missing or not yet released
        """
        if not is_supported(filename):
            return None
        if not is_released(parse_filename(filename).release_date, self.clock()):
            logger.info("audio_embargoed", filename=filename)
            return None
        asset = await self.audio_source.get_asset(filename)
        if asset is None:
            logger.info("audio_not_found", filename=filename)
        return asset
