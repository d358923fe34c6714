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
Supported audio formats and content-type tagging.

Each supported extension maps to one fixed content type. The extension is
authoritative: an optional mutagen sniff can only raise a warning when the
bytes disagree with the declared type, it never rejects a file.
"""

from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

import mutagen
from structlog import get_logger

logger = get_logger(__name__)

AUDIO_CONTENT_TYPES: dict[str, str] = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".opus": "audio/opus",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
}

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(AUDIO_CONTENT_TYPES)

# Spellings that name the same container. Ogg is ambiguous (Vorbis, Opus,
# FLAC-in-Ogg), so every Ogg flavour counts as a match for every other.
_EQUIVALENT_TYPES: Tuple[frozenset[str], ...] = (
    frozenset({"audio/mpeg", "audio/mp3", "audio/mpeg3", "audio/x-mpeg"}),
    frozenset({"audio/mp4", "audio/x-m4a", "audio/m4a", "audio/aac", "audio/x-aac", "audio/aacp"}),
    frozenset({"audio/ogg", "audio/vorbis", "audio/opus", "application/ogg", "audio/x-ogg"}),
    frozenset({"audio/wav", "audio/wave", "audio/x-wav", "audio/vnd.wave"}),
    frozenset({"audio/flac", "audio/x-flac"}),
)


def split_audio_extension(filename: str) -> Tuple[str, Optional[str]]:
    """
    Split a filename into (stem, extension) when the extension is supported.

    Only a true trailing extension from the supported table is split off;
    anything else leaves the name whole.

    Args:
        filename: Bare filename, e.g. "2024-12-01_Intro.MP3"

    Returns:
        Tuple of stem and lower-cased extension, or (filename, None)
    """
    dot = filename.rfind(".")
    if dot < 0:
        return filename, None
    extension = filename[dot:].lower()
    if extension not in SUPPORTED_EXTENSIONS:
        return filename, None
    return filename[:dot], extension


def content_type_for(filename: str) -> Optional[str]:
    """Return the declared content type for a filename, or None if unsupported."""
    _, extension = split_audio_extension(filename)
    if extension is None:
        return None
    return AUDIO_CONTENT_TYPES[extension]


def is_supported(filename: str) -> bool:
    return content_type_for(filename) is not None


def _normalize(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def types_agree(declared: str, sniffed: Union[str, Iterable[str]]) -> bool:
    """
    Check whether a sniffed type (or list of candidate types) matches the declared one.

    Args:
        declared: Content type from the extension table
        sniffed: One content type, or the candidates a sniffer reported

    Returns:
        True if any candidate names the same container as the declared type
    """
    candidates = [sniffed] if isinstance(sniffed, str) else list(sniffed)
    declared = _normalize(declared)
    family = next((group for group in _EQUIVALENT_TYPES if declared in group), frozenset({declared}))
    return any(_normalize(candidate) in family for candidate in candidates)


def sniff_content_types(path: Union[str, Path]) -> Optional[list[str]]:
    """
    Inspect an audio file's bytes with mutagen.

    Blocking: call through a threadpool from async code.

    Args:
        path: Local path to the audio file

    Returns:
        Candidate MIME types reported by mutagen, or None if the file
        could not be identified
    """
    try:
        audio = mutagen.File(str(path))
    except (mutagen.MutagenError, OSError) as e:
        logger.debug("content_sniff_failed", path=str(path), error=str(e))
        return None

    if audio is None:
        return None
    return list(getattr(audio, "mime", []) or []) or None


def check_declared_type(filename: str, declared: str, sniffed: Optional[Iterable[str]]) -> bool:
    """
    Compare declared and sniffed types, logging a warning on mismatch.

    A mismatch is a warning condition only; the declared type is kept.

    Returns:
        True if the types agree or nothing was sniffed
    """
    if not sniffed:
        return True
    candidates = list(sniffed)
    if types_agree(declared, candidates):
        return True
    logger.warning(
        "content_type_mismatch",
        filename=filename,
        declared=declared,
        sniffed=candidates,
    )
    return False
