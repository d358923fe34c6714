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
RSS feed rendering with feedgen.

Turns the podcast block and an already gated, sorted catalog into an RSS
2.0 document with iTunes tags. Values feedgen refuses (an image that is not
.jpg/.png, an unknown explicit flag) are logged and left out of the feed
rather than failing it.
"""

from datetime import date, datetime, time, timezone
from typing import List, Optional

from feedgen.ext.base import BaseEntryExtension, BaseExtension
from feedgen.feed import FeedGenerator
from lxml import etree
from structlog import get_logger

from ..models.episode import CatalogEntry, PodcastInfo
from ..utils.podcast_categories import normalize_categories
from .episodes import strip_xml_illegal

logger = get_logger(__name__)

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"

DEFAULT_TITLE = "My Private Music Collection"
DEFAULT_DESCRIPTION = "A private collection of songs"
DEFAULT_AUTHOR = "Anonymous"
DEFAULT_LANGUAGE = "en"


class ItunesKeywordsExtension(BaseExtension):
    """Feed half of the itunes:keywords extension (namespace only)."""

    def extend_ns(self):
        return {"itunes": ITUNES_NS}


class ItunesKeywordsEntryExtension(BaseEntryExtension):
    """Adds <itunes:keywords>, which feedgen's podcast extension does not cover."""

    def __init__(self):
        self.__keywords: Optional[List[str]] = None

    def extend_ns(self):
        return {"itunes": ITUNES_NS}

    def keywords(self, keywords: Optional[List[str]] = None) -> Optional[List[str]]:
        if keywords is not None:
            self.__keywords = list(keywords)
        return self.__keywords

    def extend_rss(self, entry):
        if self.__keywords:
            element = etree.SubElement(entry, "{%s}keywords" % ITUNES_NS)
            element.text = ",".join(self.__keywords)
        return entry


def _explicit_flag(explicit: Optional[bool]) -> Optional[str]:
    if explicit is None:
        return None
    return "yes" if explicit else "no"


def _publication_date(entry: CatalogEntry) -> Optional[datetime]:
    release_date: Optional[date] = entry.episode.release_date
    if release_date is not None:
        return datetime.combine(release_date, time.min, tzinfo=timezone.utc)
    if entry.modified_time is not None:
        modified = entry.modified_time
        return modified if modified.tzinfo else modified.astimezone()
    return None


def _apply_channel(fg: FeedGenerator, podcast: PodcastInfo, base_url: str, feed_url: str, ttl: int, now: datetime):
    author = podcast.author or DEFAULT_AUTHOR

    fg.title(podcast.title or DEFAULT_TITLE)
    fg.description(podcast.description or DEFAULT_DESCRIPTION)
    fg.link(href=base_url, rel="alternate")
    fg.link(href=feed_url, rel="self")
    fg.language(podcast.language or DEFAULT_LANGUAGE)
    fg.copyright(podcast.copyright or f"{now.year} {DEFAULT_AUTHOR}")
    fg.ttl(ttl)
    fg.generator("podgate")

    fg.podcast.itunes_author(author)
    if podcast.email:
        fg.podcast.itunes_owner(name=author, email=podcast.email)

    explicit = _explicit_flag(podcast.explicit)
    if explicit:
        fg.podcast.itunes_explicit(explicit)

    if podcast.image:
        try:
            fg.podcast.itunes_image(podcast.image)
        except ValueError as e:
            logger.warning("feed_image_ignored", image=podcast.image, error=str(e))

    for category in normalize_categories(podcast.categories):
        value = {"cat": category.category}
        if category.subcategory:
            value["sub"] = category.subcategory
        try:
            fg.podcast.itunes_category(value)
        except ValueError as e:
            # feedgen ships its own, older category table
            logger.warning("feed_category_ignored", category=category.category, error=str(e))


def _apply_item(fg: FeedGenerator, entry: CatalogEntry):
    episode = entry.episode
    fe = fg.add_entry(order="append")

    fe.title(episode.title)
    fe.description(episode.description)
    fe.guid(strip_xml_illegal(episode.filename), permalink=False)
    fe.link(href=entry.url)
    fe.enclosure(entry.url, str(entry.size), entry.content_type)

    published = _publication_date(entry)
    if published is not None:
        fe.pubDate(published)

    for category in episode.categories:
        fe.category(term=category)

    if episode.author:
        fe.podcast.itunes_author(episode.author)
    if episode.duration_seconds is not None:
        fe.podcast.itunes_duration(episode.duration_seconds)
    explicit = _explicit_flag(episode.explicit)
    if explicit:
        fe.podcast.itunes_explicit(explicit)
    fe.podcast.itunes_subtitle(episode.description)
    if episode.image:
        try:
            fe.podcast.itunes_image(episode.image)
        except ValueError as e:
            logger.warning("episode_image_ignored", filename=episode.filename, image=episode.image, error=str(e))
    if episode.keywords:
        fe.itunes_keywords.keywords(episode.keywords)


def build_feed(
    podcast: PodcastInfo,
    entries: List[CatalogEntry],
    *,
    base_url: str,
    feed_url: str,
    ttl: int = 60,
    now: Optional[datetime] = None,
) -> bytes:
    """
    Render the RSS document.

    Args:
        podcast: Feed-level metadata (defaults applied for missing fields)
        entries: Released catalog entries in the order they should appear
        base_url: Site URL for the channel link
        feed_url: Self URL of the feed (includes the access token)
        ttl: Channel ttl in minutes
        now: Current time, used for the default copyright year

    Returns:
        UTF-8 encoded RSS XML
    """
    now = now or datetime.now()

    fg = FeedGenerator()
    fg.load_extension("podcast")
    fg.register_extension(
        "itunes_keywords",
        ItunesKeywordsExtension,
        ItunesKeywordsEntryExtension,
        atom=False,
    )

    _apply_channel(fg, podcast, base_url, feed_url, ttl, now)
    for entry in entries:
        _apply_item(fg, entry)

    logger.debug("feed_built", items=len(entries))
    return fg.rss_str(pretty=True)
