"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdsite.core.build import request_config, run_build
from mdsite.core.models import BuildRequest, BuildResult
from mdsite.core.scaffold import init_site, new_content
from mdsite.core.server import serve_directory
from mdsite.errors import MdsiteError


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build(request: BuildRequest) -> BuildResult:
    """Run a build with standard CLI error handling."""
    try:
        return run_build(request)
    except MdsiteError as e:
        _fail(str(e))
    except OSError as e:
        _fail("Build failed", e)


SourceOpt = Annotated[str, typer.Option("--source", "-s", help="Site source directory")]
DestinationOpt = Annotated[str, typer.Option("--destination", "-d", help="Output directory, relative to the source")]
BaseUrlOpt = Annotated[Optional[str], typer.Option("--base-url", "--baseURL", help="Override the configured base URL")]
ThemesDirOpt = Annotated[Optional[str], typer.Option("--themes-dir", "--themesDir", help="Directory holding themes")]
DraftsOpt = Annotated[bool, typer.Option("--build-drafts", "-D", help="Include draft content")]
CleanOpt = Annotated[bool, typer.Option("--clean/--no-clean", help="Empty the output directory first")]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")]


def build_cmd(
    source: SourceOpt = ".",
    destination: DestinationOpt = "public",
    base_url: BaseUrlOpt = None,
    themes_dir: ThemesDirOpt = None,
    build_drafts: DraftsOpt = False,
    clean: CleanOpt = True,
    verbose: VerboseOpt = False,
    ):
    """Build the site into the destination directory."""
    _configure_logging(verbose)
    result = _build(BuildRequest(
        site_dir=Path(source), destination_dir=destination, base_url=base_url,
        themes_dir=themes_dir, build_drafts=build_drafts, clean_destination_dir=clean,
    ))
    typer.echo(f"Built {result.pages_built} file(s) to {result.output_dir}/")


def new_cmd(
    path: Annotated[str, typer.Argument(help="Content path, e.g. posts/my-post.md")],
    source: SourceOpt = ".",
    ):
    """Create a content file from the default archetype."""
    try:
        config = request_config(BuildRequest(site_dir=Path(source)))
        created = new_content(source, path, config.content_dir)
    except MdsiteError as e:
        _fail(str(e))
    typer.echo(f"Created content: {created}")


def init_cmd(
    directory: Annotated[str, typer.Argument(help="Directory for the new site")],
    ):
    """Create a new site skeleton."""
    try:
        root = init_site(directory)
    except MdsiteError as e:
        _fail(str(e))
    typer.echo(f"Created site: {root}")


def serve_cmd(
    source: SourceOpt = ".",
    destination: DestinationOpt = "public",
    base_url: BaseUrlOpt = None,
    themes_dir: ThemesDirOpt = None,
    build_drafts: DraftsOpt = False,
    clean: CleanOpt = True,
    host: Annotated[str, typer.Option("--bind", "--host", help="Interface to bind")] = "localhost",
    port: Annotated[int, typer.Option("--port", "-p", help="Port to listen on")] = 1313,
    verbose: VerboseOpt = False,
    ):
    """Build the site, then serve the output directory over HTTP."""
    _configure_logging(verbose)
    result = _build(BuildRequest(
        site_dir=Path(source), destination_dir=destination,
        base_url=base_url or f"http://{host}:{port}/",
        themes_dir=themes_dir, build_drafts=build_drafts, clean_destination_dir=clean,
    ))
    typer.echo(f"Built {result.pages_built} file(s); serving http://{host}:{port}/ (Ctrl+C to stop)")
    serve_directory(result.output_dir, host, port)
