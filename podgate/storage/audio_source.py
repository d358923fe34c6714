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
Audio source interface for podgate.

An audio source answers two questions for the catalog: which audio files
exist, and what size and URL each one has. Two interchangeable backends
exist, chosen by configuration:

    - LocalAudioSource: files in a local directory, served by podgate itself
    - ManifestAudioSource: files uploaded to a hosting platform's CDN and
      recorded in a newline-delimited JSON asset manifest (.glitch-assets)

Nothing is cached; every call re-reads the directory or manifest.

Usage:
    from podgate.storage.audio_source import create_audio_source

    source = create_audio_source(config)
    for asset in await source.list_assets():
        print(f"{asset.filename}: {asset.size} bytes")
"""

import json
import stat
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

import aiofiles
import aiofiles.os
from starlette.concurrency import run_in_threadpool
from structlog import get_logger

from ..core.audio_formats import sniff_content_types
from ..models.episode import AudioAsset
from ..utils.exceptions import ConfigurationError, ManifestError

if TYPE_CHECKING:
    from ..utils.config import Config

logger = get_logger(__name__)


def is_bare_filename(filename: str) -> bool:
    """Check that a requested name cannot address anything outside the source."""
    if not filename or filename in (".", ".."):
        return False
    return "/" not in filename and "\\" not in filename and "\x00" not in filename


class AudioSource(ABC):
    """
    Abstract interface for enumerating and locating audio files.

    Filenames are bare names (no directories) and are the episode keys.
    """

    @abstractmethod
    async def list_assets(self) -> List[AudioAsset]:
        """
        List every file the source knows about.

        Unsupported files are included; filtering by extension is the
        catalog's job. A file that vanishes while listing is left out.

        Returns:
            Assets in filename order
        """
        pass

    @abstractmethod
    async def get_asset(self, filename: str) -> Optional[AudioAsset]:
        """
        Look up one file by exact name.

        Args:
            filename: Bare filename

        Returns:
            The asset, or None if it does not exist
        """
        pass

    async def sniffed_types(self, asset: AudioAsset) -> Optional[List[str]]:
        """
        Content types detected independently of the extension, if available.

        The default implementation reports whatever the source recorded.
        """
        if asset.sniffed_type:
            return [asset.sniffed_type]
        return None


class LocalAudioSource(AudioSource):
    """
    Local directory implementation of AudioSource.

    Assets carry a local_path and no url; the web layer builds a
    token-bearing URL pointing back at its own /audio route.
    """

    def __init__(self, audio_dir: Path, sniff_content_type: bool = False):
        """
        Initialize local audio source.

        Args:
            audio_dir: Directory holding the audio files (not created here)
            sniff_content_type: Inspect file bytes with mutagen when asked for sniffed types
        """
        self.audio_dir = Path(audio_dir).resolve()
        self.sniff_content_type = sniff_content_type

    def _resolve_path(self, filename: str) -> Optional[Path]:
        if not is_bare_filename(filename):
            return None
        resolved = (self.audio_dir / filename).resolve()
        try:
            resolved.relative_to(self.audio_dir)
        except ValueError:
            return None
        return resolved

    async def _stat_asset(self, filename: str, path: Path) -> Optional[AudioAsset]:
        try:
            st = await aiofiles.os.stat(path)
        except FileNotFoundError:
            return None
        if not stat.S_ISREG(st.st_mode):
            return None
        return AudioAsset(
            filename=filename,
            size=st.st_size,
            modified_time=datetime.fromtimestamp(st.st_mtime),
            local_path=path,
        )

    async def list_assets(self) -> List[AudioAsset]:
        try:
            names = await aiofiles.os.listdir(self.audio_dir)
        except FileNotFoundError:
            logger.warning("audio_dir_missing", path=str(self.audio_dir))
            return []

        assets = []
        for name in sorted(names):
            asset = await self._stat_asset(name, self.audio_dir / name)
            if asset is not None:
                assets.append(asset)
        return assets

    async def get_asset(self, filename: str) -> Optional[AudioAsset]:
        path = self._resolve_path(filename)
        if path is None:
            return None
        return await self._stat_asset(filename, path)

    async def sniffed_types(self, asset: AudioAsset) -> Optional[List[str]]:
        if not self.sniff_content_type or asset.local_path is None:
            return None
        return await run_in_threadpool(sniff_content_types, asset.local_path)


def _parse_manifest_time(value) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_manifest_size(value) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def parse_asset_manifest(text: str) -> Dict[str, AudioAsset]:
    """
    Parse a newline-delimited JSON asset manifest.

    Each line is one record. Upload records carry ``name``, ``url``,
    ``size``, ``type``, ``date`` and ``uuid``; a record with
    ``"deleted": true`` removes the upload with the same ``uuid``.
    Blank or malformed lines are skipped.

    Args:
        text: Manifest file contents

    Returns:
        Mapping of filename to asset for every live upload
    """
    uploads: Dict[str, dict] = {}

    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("manifest_line_skipped", line=line_number, error=str(e))
            continue
        if not isinstance(record, dict):
            logger.warning("manifest_line_skipped", line=line_number, error="record is not an object")
            continue

        key = record.get("uuid") or record.get("name")
        if not isinstance(key, str):
            continue

        if record.get("deleted"):
            uploads.pop(key, None)
        elif isinstance(record.get("name"), str):
            uploads[key] = record

    assets: Dict[str, AudioAsset] = {}
    for record in uploads.values():
        url = record.get("url")
        sniffed = record.get("type")
        assets[record["name"]] = AudioAsset(
            filename=record["name"],
            size=_parse_manifest_size(record.get("size")),
            url=url if isinstance(url, str) and url else None,
            modified_time=_parse_manifest_time(record.get("date")),
            sniffed_type=sniffed if isinstance(sniffed, str) and sniffed else None,
        )
    return assets


class ManifestAudioSource(AudioSource):
    """
    Hosted-asset implementation of AudioSource.

    Assets carry the CDN url and the size recorded at upload time.
    """

    def __init__(self, manifest_path: Path):
        self.manifest_path = Path(manifest_path)

    async def _load(self) -> Dict[str, AudioAsset]:
        try:
            async with aiofiles.open(self.manifest_path, "r", encoding="utf-8") as f:
                text = await f.read()
        except FileNotFoundError:
            logger.warning("asset_manifest_missing", path=str(self.manifest_path))
            return {}
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError("Asset manifest could not be read", path=str(self.manifest_path)) from e

        return parse_asset_manifest(text)

    async def list_assets(self) -> List[AudioAsset]:
        assets = await self._load()
        return [assets[name] for name in sorted(assets)]

    async def get_asset(self, filename: str) -> Optional[AudioAsset]:
        if not is_bare_filename(filename):
            return None
        assets = await self._load()
        return assets.get(filename)


def create_audio_source(config: "Config") -> AudioSource:
    """
    Create the audio source selected by configuration.

    Args:
        config: Application configuration

    Returns:
        LocalAudioSource for AUDIO_SOURCE=local, ManifestAudioSource for manifest

    Raises:
        ConfigurationError: If the configured source is unknown
    """
    if config.audio_source == "local":
        return LocalAudioSource(config.audio_dir, sniff_content_type=config.sniff_content_type)
    if config.audio_source == "manifest":
        return ManifestAudioSource(config.asset_manifest_path)
    raise ConfigurationError("Unknown audio source", audio_source=config.audio_source)
