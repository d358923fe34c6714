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
Unit tests for supported audio formats and content-type checks.
"""

import pytest

from podgate.core.audio_formats import (
    check_declared_type,
    content_type_for,
    is_supported,
    sniff_content_types,
    split_audio_extension,
    types_agree,
)


class TestContentTypeFor:
    """Test extension to content-type mapping"""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("a.mp3", "audio/mpeg"),
            ("a.m4a", "audio/mp4"),
            ("a.aac", "audio/aac"),
            ("a.ogg", "audio/ogg"),
            ("a.oga", "audio/ogg"),
            ("a.opus", "audio/opus"),
            ("a.wav", "audio/wav"),
            ("a.flac", "audio/flac"),
            ("A.MP3", "audio/mpeg"),
        ],
    )
    def test_supported(self, filename, expected):
        assert content_type_for(filename) == expected
        assert is_supported(filename)

    @pytest.mark.parametrize("filename", ["cover.jpg", "notes.txt", "mp3", "archive.mp3.zip", ".glitch-assets"])
    def test_unsupported(self, filename):
        assert content_type_for(filename) is None
        assert not is_supported(filename)


class TestSplitAudioExtension:
    def test_splits_supported_extension(self):
        assert split_audio_extension("Show.mp3") == ("Show", ".mp3")

    def test_keeps_unknown_extension(self):
        assert split_audio_extension("Show.mp3.bak") == ("Show.mp3.bak", None)

    def test_no_extension(self):
        assert split_audio_extension("Show") == ("Show", None)


class TestTypesAgree:
    """Test declared vs sniffed comparison"""

    def test_exact_match(self):
        assert types_agree("audio/mpeg", "audio/mpeg")

    def test_alias_match(self):
        """mutagen reports MP3 as audio/mp3 among others"""
        assert types_agree("audio/mpeg", ["audio/mp3", "audio/mpeg"])

    def test_ogg_flavours_are_equivalent(self):
        assert types_agree("audio/ogg", ["audio/vorbis"])
        assert types_agree("audio/opus", ["audio/ogg"])

    def test_parameters_are_ignored(self):
        assert types_agree("audio/ogg", "audio/ogg; codecs=opus")

    def test_mismatch(self):
        assert not types_agree("audio/mpeg", ["audio/wav", "audio/wave"])


class TestCheckDeclaredType:
    def test_nothing_sniffed_is_fine(self):
        assert check_declared_type("a.mp3", "audio/mpeg", None) is True

    def test_match(self):
        assert check_declared_type("a.mp3", "audio/mpeg", ["audio/mp3"]) is True

    def test_mismatch_is_reported_not_raised(self):
        assert check_declared_type("a.mp3", "audio/mpeg", ["audio/flac"]) is False


class TestSniffContentTypes:
    def test_unidentifiable_file_returns_none(self, tmp_path):
        path = tmp_path / "silence.mp3"
        path.write_bytes(b"\x00" * 1024)
        assert sniff_content_types(path) is None

    def test_missing_file_returns_none(self, tmp_path):
        assert sniff_content_types(tmp_path / "gone.mp3") is None
