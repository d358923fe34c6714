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

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .exceptions import ConfigurationError

DEFAULT_SECRET_TOKEN = "your-secret-token"
AUDIO_SOURCES = ("local", "manifest")


class Config(BaseModel):
    # Access
    secret_token: str = DEFAULT_SECRET_TOKEN

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    public_base_url: Optional[str] = None  # Overrides the request's base URL in generated links
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Storage Paths
    storage_path: Path = Path("./.data")
    audio_dir: Path = Path("./.data/audio")
    metadata_path: Path = Path("./.data/metadata.yml")

    # Audio Source Configuration
    audio_source: str = "local"  # local or manifest
    asset_manifest_path: Path = Path("./.glitch-assets")
    sniff_content_type: bool = False  # Inspect local files with mutagen

    # Feed Configuration
    feed_ttl: int = 60  # Minutes

    @property
    def uses_default_token(self) -> bool:
        return self.secret_token == DEFAULT_SECRET_TOKEN

    def ensure_directories(self):
        """Create storage directories if they don't exist"""
        for directory in (self.storage_path, self.audio_dir, self.metadata_path.parent):
            directory.mkdir(parents=True, exist_ok=True)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer", value=raw) from None


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config(env_file: Optional[str] = None) -> Config:
    """Load configuration from environment variables and .env file"""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    audio_source = os.getenv("AUDIO_SOURCE", "local").strip().lower()
    if audio_source not in AUDIO_SOURCES:
        raise ConfigurationError(
            f"AUDIO_SOURCE must be one of: {', '.join(AUDIO_SOURCES)}",
            value=audio_source,
        )

    # All data paths derive from STORAGE_PATH unless set explicitly
    storage_path = Path(os.getenv("STORAGE_PATH", "./.data"))
    cors_origins = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

    config_data = {
        "secret_token": os.getenv("SECRET_TOKEN", DEFAULT_SECRET_TOKEN),
        "host": os.getenv("HOST", "0.0.0.0"),
        "port": _int_env("PORT", 3000),
        "public_base_url": os.getenv("PUBLIC_BASE_URL") or None,
        "cors_origins": cors_origins or ["*"],
        "storage_path": storage_path,
        "audio_dir": Path(os.getenv("AUDIO_DIR", str(storage_path / "audio"))),
        "metadata_path": Path(os.getenv("METADATA_PATH", str(storage_path / "metadata.yml"))),
        "audio_source": audio_source,
        "asset_manifest_path": Path(os.getenv("ASSET_MANIFEST_PATH", "./.glitch-assets")),
        "sniff_content_type": _bool_env("SNIFF_CONTENT_TYPE"),
        "feed_ttl": _int_env("FEED_TTL", 60),
    }

    return Config(**config_data)
