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
Unit tests for catalog assembly.

Tests cover:
- Extension filtering
- Release gating
- Ordering and tie-breaks
- URL resolution for local and hosted assets
- Content-type tagging and sniff mismatches
"""

import asyncio
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

import pytest

from podgate.core.catalog import assemble_catalog, select_released, sort_episodes
from podgate.core.episodes import resolve_episode
from podgate.models.episode import AudioAsset, MetadataDocument
from podgate.storage.audio_source import AudioSource


class FakeAudioSource(AudioSource):
    """In-memory audio source for catalog tests."""

    def __init__(self, assets: List[AudioAsset], sniffed: Optional[dict] = None):
        self.assets = assets
        self.sniffed = sniffed or {}

    async def list_assets(self) -> List[AudioAsset]:
        return list(self.assets)

    async def get_asset(self, filename: str) -> Optional[AudioAsset]:
        return next((asset for asset in self.assets if asset.filename == filename), None)

    async def sniffed_types(self, asset: AudioAsset):
        return self.sniffed.get(asset.filename)


def local_asset(name: str, size: int = 100) -> AudioAsset:
    return AudioAsset(filename=name, size=size, local_path=Path("/audio") / name, modified_time=datetime(2024, 1, 1))


def url_for(filename: str) -> str:
    return f"http://test/audio/{filename}?token=t"


NAMES = [
    "bonus_track.mp3",
    "2024-12-24_Christmas_Eve_Special.mp3",
    "2024-12-01_First_Day_Of_Christmas.mp3",
    "cover.jpg",
    "2024-12-05_Second_Day.m4a",
    "manifest.json",
]


class TestSelectReleased:
    """Test filtering, gating and ordering"""

    def test_unsupported_files_are_skipped(self):
        episodes = select_released(NAMES, MetadataDocument(), date(2025, 1, 1))
        filenames = [episode.filename for episode in episodes]
        assert "cover.jpg" not in filenames
        assert "manifest.json" not in filenames

    def test_unreleased_episodes_are_excluded(self):
        episodes = select_released(NAMES, MetadataDocument(), date(2024, 12, 10))
        assert [episode.filename for episode in episodes] == [
            "2024-12-05_Second_Day.m4a",
            "2024-12-01_First_Day_Of_Christmas.mp3",
            "bonus_track.mp3",
        ]

    def test_nothing_after_now_is_ever_listed(self):
        now = date(2024, 12, 3)
        for episode in select_released(NAMES, MetadataDocument(), now):
            assert episode.release_date is None or episode.release_date <= now

    def test_undated_episode_listed_before_any_release(self):
        """Undated files are always released, whatever the date"""
        episodes = select_released(NAMES, MetadataDocument(), date(1999, 1, 1))
        assert [episode.filename for episode in episodes] == ["bonus_track.mp3"]

    def test_undated_sorts_after_every_dated_episode(self):
        episodes = select_released(NAMES, MetadataDocument(), date(2025, 1, 1))
        assert episodes[-1].filename == "bonus_track.mp3"
        assert episodes[0].filename == "2024-12-24_Christmas_Eve_Special.mp3"

    def test_datetime_now_is_truncated_to_day(self):
        episodes = select_released(NAMES, MetadataDocument(), datetime(2024, 12, 24, 0, 0, 1))
        assert episodes[0].filename == "2024-12-24_Christmas_Eve_Special.mp3"


class TestSortEpisodes:
    def test_same_date_ties_break_by_filename(self):
        metadata = MetadataDocument()
        episodes = [
            resolve_episode(name, metadata)
            for name in ["2024-12-01_b.mp3", "zeta.mp3", "2024-12-01_a.mp3", "alpha.mp3"]
        ]
        ordered = [episode.filename for episode in sort_episodes(episodes)]
        assert ordered == ["2024-12-01_a.mp3", "2024-12-01_b.mp3", "alpha.mp3", "zeta.mp3"]

    def test_order_does_not_depend_on_input_order(self):
        metadata = MetadataDocument()
        names = ["2024-12-01_b.mp3", "zeta.mp3", "2024-12-03_c.mp3", "alpha.mp3"]
        forward = sort_episodes(resolve_episode(name, metadata) for name in names)
        backward = sort_episodes(resolve_episode(name, metadata) for name in reversed(names))
        assert forward == backward


class TestAssembleCatalog:
    """Test enrichment with size, URL and content type"""

    def test_local_assets_get_served_url(self):
        source = FakeAudioSource([local_asset("2024-12-01_First_Day_Of_Christmas.mp3", size=1234)])
        entries = asyncio.run(assemble_catalog(source, MetadataDocument(), date(2024, 12, 10), url_for))

        assert len(entries) == 1
        entry = entries[0]
        assert entry.url == "http://test/audio/2024-12-01_First_Day_Of_Christmas.mp3?token=t"
        assert entry.size == 1234
        assert entry.content_type == "audio/mpeg"
        assert entry.episode.title == "First Day Of Christmas"

    def test_hosted_assets_keep_cdn_url(self):
        asset = AudioAsset(filename="bonus_track.mp3", size=99, url="https://cdn.example.com/bonus_track.mp3")
        entries = asyncio.run(assemble_catalog(FakeAudioSource([asset]), MetadataDocument(), date(2024, 1, 1), url_for))
        assert entries[0].url == "https://cdn.example.com/bonus_track.mp3"
        assert entries[0].size == 99

    def test_asset_without_any_url_is_skipped(self):
        assets = [
            AudioAsset(filename="broken.mp3", size=10),
            local_asset("bonus_track.mp3"),
        ]
        entries = asyncio.run(assemble_catalog(FakeAudioSource(assets), MetadataDocument(), date(2024, 1, 1), url_for))
        assert [entry.episode.filename for entry in entries] == ["bonus_track.mp3"]

    def test_content_type_follows_extension(self):
        assets = [local_asset("2024-01-01_a.m4a"), local_asset("2024-01-02_b.ogg"), local_asset("2024-01-03_c.flac")]
        entries = asyncio.run(assemble_catalog(FakeAudioSource(assets), MetadataDocument(), date(2024, 2, 1), url_for))
        assert [entry.content_type for entry in entries] == ["audio/flac", "audio/ogg", "audio/mp4"]

    def test_sniff_mismatch_keeps_file_and_declared_type(self):
        source = FakeAudioSource([local_asset("bonus_track.mp3")], sniffed={"bonus_track.mp3": ["audio/wav"]})
        entries = asyncio.run(assemble_catalog(source, MetadataDocument(), date(2024, 1, 1), url_for))
        assert len(entries) == 1
        assert entries[0].content_type == "audio/mpeg"

    def test_unreleased_assets_are_not_enriched(self):
        """Gated entries never reach url building"""
        built = []

        def tracking_url_for(filename):
            built.append(filename)
            return url_for(filename)

        assets = [local_asset("2024-12-24_Christmas_Eve_Special.mp3"), local_asset("bonus_track.mp3")]
        asyncio.run(assemble_catalog(FakeAudioSource(assets), MetadataDocument(), date(2024, 12, 10), tracking_url_for))
        assert built == ["bonus_track.mp3"]

    def test_metadata_flows_into_entries(self):
        metadata = MetadataDocument(
            episodes={"2024-12-24_Christmas_Eve_Special.mp3": {"description": "The grand finale!", "duration": "5:30"}}
        )
        source = FakeAudioSource([local_asset("2024-12-24_Christmas_Eve_Special.mp3")])
        entries = asyncio.run(assemble_catalog(source, metadata, date(2024, 12, 24), url_for))
        episode = entries[0].episode
        assert episode.description == "The grand finale!"
        assert episode.duration_seconds == 330

    def test_to_dict_shape(self):
        source = FakeAudioSource([local_asset("2024-12-01_First_Day_Of_Christmas.mp3", size=7)])
        entry = asyncio.run(assemble_catalog(source, MetadataDocument(), date(2024, 12, 10), url_for))[0]
        data = entry.to_dict()
        assert data["release_date"] == "2024-12-01"
        assert data["size"] == 7
        assert data["content_type"] == "audio/mpeg"
        assert set(data) == {
            "filename",
            "release_date",
            "title",
            "description",
            "author",
            "duration_seconds",
            "explicit",
            "categories",
            "keywords",
            "image",
            "url",
            "size",
            "content_type",
        }
