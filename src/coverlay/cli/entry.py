"""Definition of the command line interface."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import sys
from typing import TYPE_CHECKING, Any

import click
import httpx

from coverlay import __version__, logger
from coverlay.cli.errors import EXIT_DATAERR, EXIT_OK, EXIT_UNAVAILABLE, EXIT_USAGE
from coverlay.cli.render import render_decorations, render_json, render_ratios
from coverlay.core.config import DEFAULT_ENDPOINT_URL, LOG_FORMAT
from coverlay.core.decorations import to_decorations
from coverlay.core.model import (
    CoverageModel,
    commit_coverage_ratio,
    file_coverage_ratios,
    file_line_coverage,
)
from coverlay.core.settings import resolve_settings
from coverlay.core.uri import ResolvedLocation, resolve_location
from coverlay.errors import LocationError, MalformedResponseError, RemoteUnavailableError

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Coroutine

    from coverlay.core.settings import Settings


@dataclasses.dataclass(slots=True)
class CoverlayOptions:
    """Collected global CLI options."""

    debug: bool = False
    quiet: bool = False
    verbose: bool = False
    use_color: bool = True
    # injected by tests to avoid the network
    transport: httpx.AsyncBaseTransport | None = None


# --------------------------------------------------------------------------- #
# Helpers                                                                     #
# --------------------------------------------------------------------------- #


def _configure_runtime(*, quiet: bool, verbose: bool, debug: bool) -> None:
    """Configure logging based on *quiet*/*verbose*."""
    level = logging.ERROR if quiet else (logging.DEBUG if verbose else logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    if debug:
        logger.debug("debug mode active")


def _settings(endpoint: str, token: str | None, **raw: Any) -> Settings:
    return resolve_settings({**raw, "endpoints": [{"url": endpoint, "token": token}]})


def _model(opts: CoverlayOptions) -> CoverageModel:
    return CoverageModel(transport=opts.transport)


def _run(opts: CoverlayOptions, coro: Coroutine[Any, Any, str]) -> str:
    """Run *coro*, mapping coverage failures to exit codes."""
    try:
        return asyncio.run(coro)
    except LocationError as e:
        code, err = EXIT_USAGE, e
    except MalformedResponseError as e:
        code, err = EXIT_DATAERR, e
    except RemoteUnavailableError as e:
        code, err = EXIT_UNAVAILABLE, e
    click.echo(f"ERROR: {err}", err=True)
    if opts.debug:
        raise err
    sys.exit(code)


# --------------------------------------------------------------------------- #
# CLI - root command group                                                    #
# --------------------------------------------------------------------------- #
@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
@click.option("--version", is_flag=True, is_eager=True, help="Show the version and exit")
@click.option("--debug", is_flag=True, help="Show full tracebacks for errors")
@click.option("-q", "--quiet", is_flag=True, help="Suppress INFO logs, emit only errors")
@click.option("-v", "--verbose", is_flag=True, help="Emit diagnostic logging")
@click.option("--color/--no-color", "use_color", default=None, help="Force or disable ANSI colors")
@click.pass_context
def cli(
    ctx: click.Context, *, version: bool, debug: bool, quiet: bool, verbose: bool, use_color: bool | None
) -> None:
    """Coverlay - overlay remote commit coverage onto source files."""
    opts = ctx.ensure_object(CoverlayOptions)
    opts.debug, opts.quiet, opts.verbose = debug, quiet, verbose
    opts.use_color = sys.stdout.isatty() if use_color is None else use_color

    if version:
        click.echo(__version__)
        ctx.exit(EXIT_OK)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(EXIT_OK)

    _configure_runtime(quiet=quiet, verbose=verbose, debug=debug)


# --------------------------------------------------------------------------- #
# Sub-command: version                                                        #
# --------------------------------------------------------------------------- #
@cli.command()
def version() -> None:
    """Print the version and exit."""
    click.echo(__version__)


# --------------------------------------------------------------------------- #
# Sub-command: decorations                                                    #
# --------------------------------------------------------------------------- #
_endpoint_option = click.option(
    "--endpoint",
    default=DEFAULT_ENDPOINT_URL,
    show_default=True,
    help="Coverage service base URL",
)
_token_option = click.option("--token", envvar="COVERLAY_TOKEN", help="API token for private repositories")
_format_option = click.option(
    "--format",
    "format_",
    default="human",
    show_default=True,
    type=click.Choice(["human", "json"], case_sensitive=False),
    help="Output format",
)


@cli.command(name="decorations")
@click.argument("uri")
@click.option("--root", "root_uri", help="Workspace root URI (git://HOST/OWNER/REPO?REV) for plain file URIs")
@_endpoint_option
@_token_option
@click.option("--line-coverage/--no-line-coverage", default=True, help="Color lines by coverage")
@click.option("--hit-counts/--no-hit-counts", default=False, help="Annotate lines with hit/branch counts")
@_format_option
@click.pass_obj
def decorations(
    opts: CoverlayOptions,
    *,
    uri: str,
    root_uri: str | None,
    endpoint: str,
    token: str | None,
    line_coverage: bool,
    hit_counts: bool,
    format_: str,
) -> None:
    """Show the line decorations an editor would receive for URI."""
    settings = _settings(endpoint, token, showLineCoverage=line_coverage, showLineHitCounts=hit_counts)

    async def build() -> str:
        root = resolve_location(None, root_uri).commit() if root_uri else None
        location = resolve_location(root, uri)
        if location.path is None:
            msg = f"{uri} names a commit, not a file"
            raise LocationError(msg)
        async with _model(opts) as model:
            data = await model.fetch(location, settings)
        coverage = file_line_coverage(data, location.path)
        decos = to_decorations(settings, coverage)
        if format_ == "json":
            return render_json({
                "uri": uri,
                "location": dataclasses.asdict(location),
                "decorations": [d.to_wire() for d in decos],
            })
        return render_decorations(uri, coverage, decos, color=opts.use_color)

    click.echo(_run(opts, build()))


# --------------------------------------------------------------------------- #
# Sub-command: ratios                                                         #
# --------------------------------------------------------------------------- #
@cli.command(name="ratios")
@click.argument("root_uri")
@_endpoint_option
@_token_option
@_format_option
@click.pass_obj
def ratios(opts: CoverlayOptions, *, root_uri: str, endpoint: str, token: str | None, format_: str) -> None:
    """Show commit and per-file coverage ratios for ROOT_URI."""
    settings = _settings(endpoint, token)

    async def build() -> str:
        root: ResolvedLocation = resolve_location(None, root_uri).commit()
        async with _model(opts) as model:
            data = await model.fetch(root, settings)
        commit_ratio = commit_coverage_ratio(data)
        file_ratios = file_coverage_ratios(data)
        if format_ == "json":
            return render_json({"commit": commit_ratio, "files": file_ratios})
        return render_ratios(commit_ratio, file_ratios, color=opts.use_color)

    click.echo(_run(opts, build()))


def main() -> None:  # pragma: no cover
    cli()


__all__ = ["CoverlayOptions", "cli", "main"]
