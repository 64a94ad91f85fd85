"""CLI interface for Docroute.

Command-line tool for compiling sidebars into routes and serving the site.
"""

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from docroute.config import Config
from docroute.core.build import BuildResult, build_site, write_build_output

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover docroute.toml)",
)
source_dir_option = click.option(
    "--source-dir",
    "-s",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Documentation source directory (overrides config)",
)
sidebar_option = click.option(
    "--sidebar",
    "sidebar_file",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Sidebar declaration file (overrides config)",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Docroute - compile documentation sidebars into routes and navigation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@config_option
@source_dir_option
@sidebar_option
@click.option(
    "--out-dir",
    "-o",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Build output directory (overrides config)",
)
def build(
    config_path: Path | None,
    source_dir: Path | None,
    sidebar_file: Path | None,
    out_dir: Path | None,
) -> None:
    """Compile routes and navigation and write them to the build directory."""
    config = _load_config(config_path, source_dir, sidebar_file, build_dir=out_dir)
    result = _build_or_exit(config)

    written = write_build_output(result, config.docs.build_dir)
    for path in written:
        click.echo(f"Wrote {path}")
    click.echo(click.style(f"✓ Compiled {len(result.routes)} routes", fg="green"))


@cli.command()
@config_option
@source_dir_option
@sidebar_option
def check(
    config_path: Path | None,
    source_dir: Path | None,
    sidebar_file: Path | None,
) -> None:
    """Validate sidebars and routes without writing output."""
    config = _load_config(config_path, source_dir, sidebar_file)
    result = _build_or_exit(config)

    unlisted = sum(
        1 for entry in result.routes if entry.kind == "doc" and entry.sidebar_id is None
    )
    click.echo(click.style("✓ Build is valid", fg="green"))
    click.echo(f"  Documents: {len(result.documents)}")
    click.echo(f"  Routes: {len(result.routes)}")
    click.echo(f"  Sidebars: {', '.join(result.navigation) or '(none)'}")
    if unlisted:
        click.echo(f"  Unlisted documents: {unlisted}")


@cli.command()
@config_option
@source_dir_option
@sidebar_option
def routes(
    config_path: Path | None,
    source_dir: Path | None,
    sidebar_file: Path | None,
) -> None:
    """Print the compiled route table."""
    config = _load_config(config_path, source_dir, sidebar_file)
    result = _build_or_exit(config)

    for entry in result.routes:
        sidebar = entry.sidebar_id or "-"
        click.echo(f"{entry.path}\t{entry.component_id}\t{entry.kind}\t{sidebar}")


@cli.command()
@click.argument("request_path")
@config_option
@source_dir_option
@sidebar_option
def resolve(
    request_path: str,
    config_path: Path | None,
    source_dir: Path | None,
    sidebar_file: Path | None,
) -> None:
    """Resolve a request path the way the server does."""
    config = _load_config(config_path, source_dir, sidebar_file)
    result = _build_or_exit(config)

    entry = result.routes.resolve(request_path)
    click.echo(f"Path: {entry.path}")
    click.echo(f"Kind: {entry.kind}")
    click.echo(f"Component: {entry.component_id}")
    if entry.doc_id is not None:
        click.echo(f"Document: {entry.doc_id}")

    tree = result.navigation_for(entry)
    if tree is not None:
        prev_item, next_item = tree.get_pagination(entry.path)
        click.echo(f"Previous: {prev_item.path if prev_item else '-'}")
        click.echo(f"Next: {next_item.path if next_item else '-'}")

    if entry.is_catch_all:
        sys.exit(2)


@cli.command()
@config_option
@source_dir_option
@sidebar_option
@click.option("--host", default=None, help="Host to bind to (overrides config)")
@click.option("--port", "-p", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
def serve(
    config_path: Path | None,
    source_dir: Path | None,
    sidebar_file: Path | None,
    host: str | None,
    port: int | None,
    live_reload: bool | None,
) -> None:
    """Start the documentation server."""
    from docroute.server import run_server

    config = _load_config(config_path, source_dir, sidebar_file).with_overrides(
        host=host,
        port=port,
        live_reload_enabled=live_reload,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Source directory: {config.docs.source_dir}")
    click.echo(f"Sidebar file: {config.docs.sidebar_file}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    try:
        run_server(config)
    except (ValueError, FileNotFoundError) as e:
        _fail(e)


def _load_config(
    config_path: Path | None,
    source_dir: Path | None,
    sidebar_file: Path | None,
    *,
    build_dir: Path | None = None,
) -> Config:
    try:
        config = Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)
    return config.with_overrides(
        source_dir=source_dir,
        sidebar_file=sidebar_file,
        build_dir=build_dir,
    )


def _build_or_exit(config: Config) -> BuildResult:
    try:
        return build_site(config)
    except (ValueError, FileNotFoundError) as e:
        _fail(e)


def _fail(error: Exception) -> NoReturn:
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
