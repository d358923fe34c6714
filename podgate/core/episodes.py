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
Episode resolution: filename parsing, metadata merging and release gating.

Filenames follow the producer convention ``YYYY-MM-DD_Title_With_Underscores.ext``.
The date prefix is the release date; files without one are always released.
Every function here is pure and total: malformed input degrades one field
to its default and never raises.
"""

import re
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Union

from structlog import get_logger

from ..models.episode import Episode, MetadataDocument, ParsedFilename, PodcastInfo
from ..utils.duration import parse_duration
from .audio_formats import split_audio_extension

logger = get_logger(__name__)

DATE_PREFIX_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})[_\- ]?")

_TRUE_STRINGS = {"yes", "true", "explicit"}
_FALSE_STRINGS = {"no", "false", "clean"}

# Characters XML 1.0 cannot carry; lxml refuses them when the feed is rendered
XML_ILLEGAL_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _parse_date_prefix(filename: str) -> Optional[re.Match]:
    match = DATE_PREFIX_PATTERN.match(filename)
    if not match:
        return None
    year, month, day = (int(group) for group in match.groups())
    try:
        date(year, month, day)
    except ValueError:
        # Looks like a date but is not one (e.g. 2024-13-40): treat as undated
        return None
    return match


def parse_filename(filename: str) -> ParsedFilename:
    """
    Extract the release date and default title from a filename.

    Args:
        filename: Bare filename, e.g. "2024-12-01_First_Day_Of_Christmas.mp3"

    Returns:
        ParsedFilename with release_date (None when undated) and default_title

    Example:
        >>> parse_filename("2024-12-01_First_Day_Of_Christmas.mp3")
        ParsedFilename(release_date=datetime.date(2024, 12, 1), default_title='First Day Of Christmas')
    """
    release_date = None
    remainder = filename

    match = _parse_date_prefix(filename)
    if match:
        year, month, day = (int(group) for group in match.groups())
        release_date = date(year, month, day)
        remainder = filename[match.end():]

    stem, _ = split_audio_extension(remainder)
    if not stem:
        # Date-only name such as "2024-12-01.mp3"
        stem, _ = split_audio_extension(filename)
    return ParsedFilename(release_date=release_date, default_title=strip_xml_illegal(stem).replace("_", " "))


def is_released(release_date: Optional[date], now: Union[date, datetime]) -> bool:
    """
    Decide whether an episode is publicly visible.

    The episode becomes visible at the start of its release day in local
    time; "now" is supplied by the caller so the gate never reads a clock.

    Args:
        release_date: Release date from the filename, or None
        now: Current date or datetime (datetimes are truncated to the day)

    Returns:
        True if the episode is released
    """
    if release_date is None:
        return True
    today = now.date() if isinstance(now, datetime) else now
    return release_date <= today


def strip_xml_illegal(text: str) -> str:
    """Remove characters that cannot appear in an XML document."""
    return XML_ILLEGAL_PATTERN.sub("", text)


def _text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str) or not value.strip():
        return None
    if XML_ILLEGAL_PATTERN.search(value):
        logger.warning("metadata_value_ignored", value=repr(value), reason="contains control characters")
        return None
    return value


def _string_list(value: Any, split_commas: bool = False) -> List[str]:
    if isinstance(value, str):
        items = value.split(",") if split_commas else [value]
    elif isinstance(value, (list, tuple)):
        items = [item for item in value if isinstance(item, (str, int, float)) and not isinstance(item, bool)]
    else:
        return []
    cleaned = [str(item).strip() for item in items]
    return [item for item in cleaned if item and not XML_ILLEGAL_PATTERN.search(item)]


def _explicit(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def episode_overrides(filename: str, metadata: MetadataDocument) -> Mapping[str, Any]:
    """Return the metadata override mapping for a filename (empty when absent or malformed)."""
    overrides = metadata.episodes.get(filename)
    if overrides is None:
        return {}
    if not isinstance(overrides, Mapping):
        logger.warning("episode_metadata_ignored", filename=filename, reason="entry is not a mapping")
        return {}
    return overrides


def resolve_episode(filename: str, metadata: MetadataDocument) -> Episode:
    """
    Merge filename-derived defaults with the metadata override for one file.

    An explicit metadata value wins field by field. Title and description
    fall back to computed defaults; every other field falls back to None or
    an empty list. A bad value only ever defaults its own field.

    Args:
        filename: Exact filename (the metadata lookup key)
        metadata: Parsed metadata document

    Returns:
        Fully resolved Episode
    """
    parsed = parse_filename(filename)
    overrides = episode_overrides(filename, metadata)

    return Episode(
        filename=filename,
        release_date=parsed.release_date,
        title=_text(overrides.get("title")) or parsed.default_title,
        description=_text(overrides.get("description")) or f"Episode: {parsed.default_title}",
        author=_text(overrides.get("author")),
        duration_seconds=parse_duration(overrides.get("duration")),
        explicit=_explicit(overrides.get("explicit")),
        categories=_string_list(overrides.get("categories")),
        keywords=_string_list(overrides.get("keywords"), split_commas=True),
        image=_text(overrides.get("image")),
    )


def resolve_podcast_info(metadata: MetadataDocument) -> PodcastInfo:
    """
    Build feed-level metadata from the document's podcast block.

    Categories are kept as written (strings or ``{text, subcats}`` mappings)
    and validated by the feed builder.
    """
    block = metadata.podcast
    categories = block.get("categories")
    if isinstance(categories, (str, Mapping)):
        categories = [categories]
    elif not isinstance(categories, (list, tuple)):
        categories = []

    return PodcastInfo(
        title=_text(block.get("title")),
        description=_text(block.get("description")),
        author=_text(block.get("author")),
        language=_text(block.get("language")),
        copyright=_text(block.get("copyright")),
        categories=list(categories),
        explicit=_explicit(block.get("explicit")),
        image=_text(block.get("image")),
        email=_text(block.get("email")),
    )
