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
Pytest fixtures for podgate tests.

Provides a populated audio directory, a metadata document, a Config that
points at them, and a frozen clock so release gating is deterministic.
"""

from datetime import datetime
from pathlib import Path

import pytest

from podgate.utils.config import Config

SECRET = "s3cret-token"

# Frozen "now" for the release gate: mid-morning on 10 December 2024
FROZEN_NOW = datetime(2024, 12, 10, 9, 30)

AUDIO_FILES = {
    "2024-12-01_First_Day_Of_Christmas.mp3": b"\x00" * 1024,
    "2024-12-05_Second_Day.m4a": b"\x00" * 2048,
    "2024-12-24_Christmas_Eve_Special.mp3": b"\x00" * 4096,
    "bonus_track.mp3": b"\x00" * 512,
    "cover.jpg": b"\xff\xd8\xff",
    "notes.txt": b"not audio",
}

METADATA_YAML = """\
podcast:
  title: Advent Sounds
  author: Jane Host
  email: jane@example.com
  categories:
    - Technology
episodes:
  2024-12-24_Christmas_Eve_Special.mp3:
    description: The grand finale!
    duration: "5:30"
  2024-12-05_Second_Day.m4a:
    title: Day Two
    keywords: [winter, advent]
    explicit: "no"
"""


@pytest.fixture
def audio_dir(tmp_path) -> Path:
    """Directory with dated, undated and non-audio files."""
    directory = tmp_path / "audio"
    directory.mkdir()
    for name, content in AUDIO_FILES.items():
        (directory / name).write_bytes(content)
    return directory


@pytest.fixture
def metadata_path(tmp_path) -> Path:
    path = tmp_path / "metadata.yml"
    path.write_text(METADATA_YAML, encoding="utf-8")
    return path


@pytest.fixture
def config(tmp_path, audio_dir, metadata_path) -> Config:
    return Config(
        secret_token=SECRET,
        storage_path=tmp_path,
        audio_dir=audio_dir,
        metadata_path=metadata_path,
        asset_manifest_path=tmp_path / ".glitch-assets",
    )


@pytest.fixture
def frozen_clock():
    """Clock callable that always returns FROZEN_NOW."""
    return lambda: FROZEN_NOW
