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
Unit tests for metadata loading and storage initialization.
"""

import asyncio

import yaml

from podgate.core.metadata_loader import (
    EXAMPLE_METADATA,
    initialize_storage,
    load_metadata,
    parse_metadata,
)


class TestParseMetadata:
    """Test YAML parsing and per-section tolerance"""

    def test_full_document(self):
        doc = parse_metadata("podcast:\n  title: Show\nepisodes:\n  a.mp3:\n    title: A\n")
        assert doc.podcast == {"title": "Show"}
        assert doc.episodes == {"a.mp3": {"title": "A"}}

    def test_empty_document(self):
        doc = parse_metadata("")
        assert doc.podcast == {}
        assert doc.episodes == {}

    def test_syntax_error_degrades_to_empty(self):
        doc = parse_metadata("podcast: [unclosed\n  title: :")
        assert doc.podcast == {}
        assert doc.episodes == {}

    def test_non_mapping_document(self):
        doc = parse_metadata("- just\n- a list\n")
        assert doc.episodes == {}

    def test_bad_section_does_not_discard_the_other(self):
        doc = parse_metadata("podcast: not a mapping\nepisodes:\n  a.mp3:\n    title: A\n")
        assert doc.podcast == {}
        assert doc.episodes == {"a.mp3": {"title": "A"}}

    def test_null_sections(self):
        doc = parse_metadata("podcast:\nepisodes:\n")
        assert doc.podcast == {}
        assert doc.episodes == {}

    def test_non_string_keys_become_strings(self):
        doc = parse_metadata("episodes:\n  2024:\n    title: Year\n")
        assert doc.episodes == {"2024": {"title": "Year"}}

    def test_impossible_date_value_stays_text(self):
        """A bad date only affects its own field, not the document"""
        doc = parse_metadata("episodes:\n  a.mp3:\n    recorded: 2024-02-30\n    title: A\n")
        assert doc.episodes == {"a.mp3": {"recorded": "2024-02-30", "title": "A"}}

    def test_date_values_are_not_converted(self):
        doc = parse_metadata("podcast:\n  launched: 2024-12-01\n  updated: 2024-12-01 10:00:00\n")
        assert doc.podcast == {"launched": "2024-12-01", "updated": "2024-12-01 10:00:00"}

    def test_date_keys_stay_strings(self):
        doc = parse_metadata("episodes:\n  2024-12-01:\n    title: Dated key\n")
        assert doc.episodes == {"2024-12-01": {"title": "Dated key"}}

    def test_other_implicit_types_still_resolve(self):
        doc = parse_metadata("podcast:\n  explicit: true\n  seasons: 3\n  rating: 4.5\n")
        assert doc.podcast == {"explicit": True, "seasons": 3, "rating": 4.5}


class TestLoadMetadata:
    def test_reads_file(self, metadata_path):
        doc = asyncio.run(load_metadata(metadata_path))
        assert doc.podcast["title"] == "Advent Sounds"
        assert "2024-12-24_Christmas_Eve_Special.mp3" in doc.episodes

    def test_missing_file_is_empty(self, tmp_path):
        doc = asyncio.run(load_metadata(tmp_path / "nope.yml"))
        assert doc.podcast == {}
        assert doc.episodes == {}

    def test_directory_instead_of_file_is_empty(self, tmp_path):
        doc = asyncio.run(load_metadata(tmp_path))
        assert doc.episodes == {}

    def test_edits_are_picked_up(self, metadata_path):
        """Nothing is cached between loads"""
        metadata_path.write_text("podcast:\n  title: Renamed\n", encoding="utf-8")
        doc = asyncio.run(load_metadata(metadata_path))
        assert doc.podcast == {"title": "Renamed"}


class TestInitializeStorage:
    """Test first-run directory and example document creation"""

    def test_creates_directories_and_example(self, tmp_path):
        from podgate.utils.config import Config

        config = Config(
            storage_path=tmp_path / "data",
            audio_dir=tmp_path / "data" / "audio",
            metadata_path=tmp_path / "data" / "metadata.yml",
        )
        assert initialize_storage(config) is True
        assert config.audio_dir.is_dir()
        written = yaml.safe_load(config.metadata_path.read_text(encoding="utf-8"))
        assert written == EXAMPLE_METADATA

    def test_existing_metadata_untouched(self, config):
        before = config.metadata_path.read_text(encoding="utf-8")
        assert initialize_storage(config) is True
        assert config.metadata_path.read_text(encoding="utf-8") == before

    def test_failure_is_reported_not_raised(self, tmp_path):
        from podgate.utils.config import Config

        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        config = Config(
            storage_path=blocker,
            audio_dir=blocker / "audio",
            metadata_path=blocker / "metadata.yml",
        )
        assert initialize_storage(config) is False
