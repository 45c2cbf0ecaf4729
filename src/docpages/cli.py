"""CLI interface for docpages.

Command-line tool for building and serving the documentation pages.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from docpages.config import CollectionConfig, Config, ContentSource
from docpages.core.errors import BuildError, DocpagesError
from docpages.core.fetcher import LocalFetcher
from docpages.core.index import build_frontmatter_index
from docpages.core.paths import discover_content_files
from docpages.core.pipeline import list_collection_files

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover docpages.toml)",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
output_option = click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Write to this file instead of stdout",
)


@click.group()
def cli() -> None:
    """docpages - Consul documentation page generator."""


@cli.command()
@config_option
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Output directory (overrides config)",
)
@click.option(
    "--local",
    "force_local",
    is_flag=True,
    help="Read every collection from the local project tree",
)
@verbose_option
def build(
    config_path: Path | None,
    output_dir: Path | None,
    force_local: bool,
    verbose: bool,
) -> None:
    """Pre-render every page into the output directory."""
    from docpages.core.builder import build_site

    _setup_logging(verbose)
    config = _load_config(config_path).with_overrides(
        output_dir=output_dir,
        force_local=force_local,
    )

    click.echo(f"Content root: {config.content.root_dir}")
    click.echo(f"Output directory: {config.build.output_dir}")

    try:
        report = asyncio.run(build_site(config))
    except BuildError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        for failure in e.failures:
            click.echo(click.style(f"  {failure}", fg="red"), err=True)
        sys.exit(1)
    except DocpagesError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(
        click.style(f"\nBuilt {report.page_count} page(s)", fg="green", bold=True),
    )


@cli.command()
@config_option
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--local",
    "force_local",
    is_flag=True,
    help="Read every collection from the local project tree",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
@verbose_option
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    force_local: bool,
    live_reload: bool | None,
    verbose: bool,
) -> None:
    """Start the development server."""
    from docpages.server import run_server

    _setup_logging(verbose)
    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        live_reload_enabled=live_reload,
        force_local=force_local,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Content root: {config.content.root_dir}")
    remote = [c.name for c in config.collections.values() if c.source is ContentSource.REMOTE]
    if remote:
        click.echo(f"Remote collections: {', '.join(remote)} ({config.remote.base_url})")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    run_server(config)


@cli.command()
@click.argument("collection")
@config_option
@output_option
@verbose_option
def frontmatter(
    collection: str,
    config_path: Path | None,
    output: Path | None,
    verbose: bool,
) -> None:
    """Generate the frontmatter index of COLLECTION from local files."""
    _setup_logging(verbose)
    config = _load_config(config_path)
    collection_config = _get_collection(config, collection)

    extension = config.content.extension

    try:
        files = list_collection_files(config, collection_config)
        index = asyncio.run(
            build_frontmatter_index(
                files,
                LocalFetcher(config.content.root_dir),
                content_prefix=config.content_prefix(collection_config),
                resource_prefix=collection_config.content_dir,
                extension=extension,
            )
        )
    except (FileNotFoundError, DocpagesError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    _write_output(index.dumps(), output)


@cli.command()
@click.argument("collection")
@config_option
@output_option
def files(collection: str, config_path: Path | None, output: Path | None) -> None:
    """List the content files of COLLECTION as JSON."""
    config = _load_config(config_path)
    collection_config = _get_collection(config, collection)
    found = discover_content_files(
        config.content_dir(collection_config),
        config.content.extension,
    )
    _write_output(json.dumps(found, indent=2), output)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None) -> Config:
    """Load configuration, exiting with an error message if it is invalid."""
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


def _get_collection(config: Config, name: str) -> CollectionConfig:
    try:
        return config.get_collection(name)
    except KeyError as e:
        click.echo(click.style(f"Error: {e.args[0]}", fg="red"), err=True)
        sys.exit(1)


def _write_output(text: str, output: Path | None) -> None:
    text = text.rstrip("\n")
    if output is None:
        click.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    click.echo(f"Wrote {output}", err=True)


if __name__ == "__main__":
    cli()
