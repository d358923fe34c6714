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

import asyncio

import click

# This module can be executed in two ways:
# 1. Package mode (recommended): `podgate` command (defined in pyproject.toml entry point)
# 2. Module mode (development): `python -m podgate.cli` (uses __main__ guard at bottom)
from .core.metadata_loader import initialize_storage
from .logging import configure_structlog
from .services import CatalogService
from .storage.audio_source import create_audio_source
from .utils.config import load_config
from .utils.duration import format_duration
from .utils.exceptions import PodgateError


class CLIContext:
    """Container for CLI dependency injection with type safety."""

    def __init__(self, config, audio_source, catalog_service: CatalogService):
        self.config = config
        self.audio_source = audio_source
        self.catalog_service = catalog_service


@click.group()
@click.option("--config", "-c", help="Path to .env file")
@click.pass_context
def main(ctx, config):
    """podgate - token-gated, time-released podcast feed"""
    configure_structlog()

    try:
        config_obj = load_config(config)
        audio_source = create_audio_source(config_obj)
    except PodgateError as e:
        click.echo(f"❌ Configuration error: {e}", err=True)
        ctx.exit(1)

    ctx.obj = CLIContext(
        config=config_obj,
        audio_source=audio_source,
        catalog_service=CatalogService(config_obj, audio_source),
    )


@main.command()
@click.pass_context
def init(ctx):
    """Create storage directories and an example metadata file"""
    config = ctx.obj.config
    if not initialize_storage(config):
        click.echo("❌ Storage initialization failed (see log)", err=True)
        ctx.exit(1)
    click.echo(f"✓ Audio directory: {config.audio_dir}")
    click.echo(f"✓ Metadata file: {config.metadata_path}")


@main.command()
@click.option("--host", help="Bind address (default: HOST or 0.0.0.0)")
@click.option("--port", "-p", type=int, help="Port (default: PORT or 3000)")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
@click.pass_context
def serve(ctx, host, port, reload):
    """Run the feed server"""
    import uvicorn

    config = ctx.obj.config
    host = host or config.host
    port = port or config.port

    click.echo(f"Server running on http://{host}:{port}")
    if config.audio_source == "local":
        click.echo(f"Upload your audio files to: {config.audio_dir}")
    else:
        click.echo(f"Reading hosted assets from: {config.asset_manifest_path}")
    click.echo(f"Metadata file location: {config.metadata_path}")

    if reload:
        # Reload needs an import string; the factory re-reads the environment
        uvicorn.run("podgate.web.app:create_app", factory=True, host=host, port=port, reload=True, log_level="warning")
    else:
        from .web.app import create_app

        app = create_app(config, audio_source=ctx.obj.audio_source)
        uvicorn.run(app, host=host, port=port, log_level="warning")


@main.command()
@click.option("--all", "show_all", is_flag=True, help="Include episodes that are not released yet")
@click.pass_context
def episodes(ctx, show_all):
    """List episodes in feed order"""
    try:
        schedule = asyncio.run(ctx.obj.catalog_service.schedule())
    except PodgateError as e:
        click.echo(f"❌ {e}", err=True)
        ctx.exit(1)

    rows = [(episode, released) for episode, released in schedule if released or show_all]
    if not rows:
        click.echo("No episodes found.")
        return

    for episode, released in rows:
        release = episode.release_date.isoformat() if episode.release_date else "always"
        marker = "✓" if released else "⏳"
        duration = format_duration(episode.duration_seconds) if episode.duration_seconds is not None else "-"
        click.echo(f"{marker} {release:<10}  {duration:>8}  {episode.title}  ({episode.filename})")

    pending = sum(1 for _, released in schedule if not released)
    click.echo(f"\n{len(schedule) - pending} released, {pending} scheduled")


if __name__ == "__main__":
    main()
