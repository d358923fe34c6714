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

"""Duration parsing and formatting utilities."""

from typing import Any, Optional, Union

from structlog import get_logger

logger = get_logger(__name__)


def _parse_segment(segment: str) -> Optional[int]:
    segment = segment.strip()
    # isdigit() also accepts superscripts, which int() rejects
    if not segment.isdecimal():
        return None
    return int(segment)


def parse_duration(duration: Any) -> Optional[int]:
    """
    Parse a metadata duration value to seconds.

    Handles:
    - MM:SS format: "5:30" -> 330
    - HH:MM:SS format: "01:23:45" -> 5025
    - Integer seconds: 330 -> 330 (YAML turns unquoted numbers into ints)

    Anything else (wrong segment count, non-numeric or negative parts,
    minutes/seconds of 60 or more after the leading segment) yields None.
    Never raises.

    Args:
        duration: Raw value from the metadata document

    Returns:
        Duration in seconds as integer, or None if it cannot be parsed
    """
    if duration is None or isinstance(duration, bool):
        return None

    if isinstance(duration, int):
        return duration if duration >= 0 else None

    if not isinstance(duration, str):
        logger.debug("duration_ignored", value=repr(duration), reason="unsupported type")
        return None

    text = duration.strip()
    if not text:
        return None

    parts = [_parse_segment(part) for part in text.split(":")]
    if any(part is None for part in parts):
        logger.debug("duration_ignored", value=text, reason="non-numeric segment")
        return None

    if len(parts) == 2:
        minutes, seconds = parts
        if seconds >= 60:
            return None
        return minutes * 60 + seconds

    if len(parts) == 3:
        hours, minutes, seconds = parts
        if minutes >= 60 or seconds >= 60:
            return None
        return hours * 3600 + minutes * 60 + seconds

    logger.debug("duration_ignored", value=text, reason="wrong segment count")
    return None


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format seconds as an iTunes-style duration.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string like "1:23:45" or "45:30"
    """
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        return f"{minutes}:{secs:02d}"
