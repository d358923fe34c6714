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
Episode, podcast and catalog records.

Episodes are never persisted: they are rebuilt from the filename and the
metadata document on every request, and the filename is their only key.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MetadataDocument(BaseModel):
    """Parsed metadata document: a podcast block plus per-filename episode overrides."""

    podcast: Dict[str, Any] = Field(default_factory=dict)
    episodes: Dict[str, Any] = Field(default_factory=dict)


class ParsedFilename(BaseModel):
    """What the filename alone says about an episode."""

    release_date: Optional[date] = None
    default_title: str


class Episode(BaseModel):
    filename: str  # Exact on-disk / manifest name, used as the lookup key
    release_date: Optional[date] = None  # None means always available
    title: str
    description: str
    author: Optional[str] = None
    duration_seconds: Optional[int] = None
    explicit: Optional[bool] = None
    categories: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    image: Optional[str] = None


class PodcastInfo(BaseModel):
    """
    Feed-level metadata.

    Every field is optional in the document; the feed builder applies the
    defaults when rendering.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None
    copyright: Optional[str] = None
    categories: List[Any] = Field(default_factory=list)
    explicit: Optional[bool] = None
    image: Optional[str] = None
    email: Optional[str] = None


class AudioAsset(BaseModel):
    """
    One audio file as reported by an audio source.

    Local files carry a local_path and no url (the service builds a
    token-bearing URL); hosted assets carry a CDN url and recorded size.
    """

    filename: str
    size: int = 0
    url: Optional[str] = None
    modified_time: Optional[datetime] = None
    local_path: Optional[Path] = None
    sniffed_type: Optional[str] = None


class CatalogEntry(BaseModel):
    """A released episode with everything needed to list or enclose it."""

    episode: Episode
    url: str
    size: int
    content_type: str
    modified_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape used by the episode listing endpoint."""
        episode = self.episode
        return {
            "filename": episode.filename,
            "release_date": episode.release_date.isoformat() if episode.release_date else None,
            "title": episode.title,
            "description": episode.description,
            "author": episode.author,
            "duration_seconds": episode.duration_seconds,
            "explicit": episode.explicit,
            "categories": list(episode.categories),
            "keywords": list(episode.keywords),
            "image": episode.image,
            "url": self.url,
            "size": self.size,
            "content_type": self.content_type,
        }
