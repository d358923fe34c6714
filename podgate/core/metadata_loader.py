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
Metadata document loading and storage initialization.

The metadata document is YAML with two sections::

    podcast:
      title: My Private Music Collection
      author: Your Name
    episodes:
      2024-12-24_Christmas_Eve_Special.mp3:
        description: The grand finale!
        duration: "5:30"

It is read fresh on every request. A missing, unreadable or malformed
document degrades to an empty one and is logged; loading never raises.
"""

from pathlib import Path
from typing import Any, Mapping

import aiofiles
import yaml
from starlette.concurrency import run_in_threadpool
from structlog import get_logger

from ..models.episode import MetadataDocument
from ..utils.config import Config

logger = get_logger(__name__)

TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class MetadataLoader(yaml.SafeLoader):
    """
    SafeLoader that keeps date-like scalars as strings.

    Bare dates such as ``2024-02-30`` would otherwise be constructed as
    datetime objects, and an impossible one fails the whole document.
    """


MetadataLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

EXAMPLE_METADATA = {
    "podcast": {
        "title": "My Private Music Collection",
        "description": "A curated collection of amazing music",
        "author": "Your Name",
    },
    "episodes": {
        "YYYY-MM-DD_Example_Song.mp3": {
            "description": "Example episode metadata",
            "author": "Example Artist",
            "duration": "3:45",
        }
    },
}


def parse_metadata(text: str, source: str = "<string>") -> MetadataDocument:
    """
    Parse metadata YAML into a MetadataDocument.

    Each section degrades on its own: a ``podcast`` block that is not a
    mapping is dropped without discarding ``episodes``, and vice versa.

    Args:
        text: YAML document text
        source: Where the text came from, for log context

    Returns:
        Parsed document (empty on any YAML error)
    """
    try:
        data = yaml.load(text, Loader=MetadataLoader)
    except (yaml.YAMLError, ValueError) as e:
        logger.warning("metadata_unparseable", source=source, error=str(e))
        return MetadataDocument()

    if data is None:
        return MetadataDocument()
    if not isinstance(data, Mapping):
        logger.warning("metadata_ignored", source=source, reason="document is not a mapping")
        return MetadataDocument()

    sections: dict[str, Any] = {}
    for section in ("podcast", "episodes"):
        value = data.get(section)
        if value is None:
            continue
        if not isinstance(value, Mapping):
            logger.warning("metadata_section_ignored", source=source, section=section)
            continue
        # YAML keys may be non-strings (e.g. bare numbers); filenames are always strings
        sections[section] = {str(key): item for key, item in value.items()}

    return MetadataDocument(**sections)


async def load_metadata(path: Path) -> MetadataDocument:
    """
    Read and parse the metadata document.

    Args:
        path: Path to the YAML document

    Returns:
        Parsed document, or an empty one if it is missing or unreadable
    """
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            text = await f.read()
    except FileNotFoundError:
        logger.info("metadata_missing", path=str(path))
        return MetadataDocument()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("metadata_unreadable", path=str(path), error=str(e))
        return MetadataDocument()

    return await run_in_threadpool(parse_metadata, text, str(path))


def initialize_storage(config: Config) -> bool:
    """
    Create storage directories and an example metadata document if absent.

    Failures are logged, not raised, so the server still starts on a
    read-only filesystem.

    Args:
        config: Application configuration

    Returns:
        True if storage is ready, False if initialization failed
    """
    try:
        config.ensure_directories()

        if not config.metadata_path.exists():
            config.metadata_path.write_text(
                yaml.safe_dump(EXAMPLE_METADATA, sort_keys=False, allow_unicode=True),
                encoding="utf-8",
            )
            logger.info("metadata_example_created", path=str(config.metadata_path))

        logger.info("storage_initialized", audio_dir=str(config.audio_dir), metadata=str(config.metadata_path))
        return True
    except OSError as e:
        logger.error("storage_initialization_failed", error=str(e), exc_info=True)
        return False
