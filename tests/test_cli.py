from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx

from coverlay import __version__
from coverlay.cli import CoverlayOptions, cli
from coverlay.cli.errors import EXIT_DATAERR, EXIT_UNAVAILABLE, EXIT_USAGE
from tests.conftest import FILE_URI, ROOT_URI, FakeCoverageService

if TYPE_CHECKING:
    from click.testing import CliRunner


def _opts(service: FakeCoverageService) -> CoverlayOptions:
    return CoverlayOptions(transport=service.transport)


def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__

    result = cli_runner.invoke(cli, ["version"])
    assert result.output.strip() == __version__


def test_decorations_json(cli_runner: CliRunner, service: FakeCoverageService) -> None:
    result = cli_runner.invoke(
        cli, ["decorations", FILE_URI, "--hit-counts", "--format", "json"], obj=_opts(service)
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["location"] == {"repo": "github.com/owner/name", "revision": "abc123", "path": "dir/file.go"}
    assert [d["range"]["start"]["line"] for d in data["decorations"]] == [11, 12, 14]
    assert [d["after"]["contentText"] for d in data["decorations"]] == [" 3 ", " 2/4 ", " 0 "]


def test_decorations_human_with_root(cli_runner: CliRunner, service: FakeCoverageService) -> None:
    result = cli_runner.invoke(
        cli, ["--no-color", "decorations", "file:///dir/file.go", "--root", ROOT_URI], obj=_opts(service)
    )
    assert result.exit_code == 0, result.output
    assert "statement" in result.output
    assert "hsla(120, 100%, 70%, 0.25)" in result.output


def test_decorations_sends_token(cli_runner: CliRunner, service: FakeCoverageService) -> None:
    result = cli_runner.invoke(
        cli,
        ["decorations", FILE_URI, "--endpoint", "https://cov.example/path", "--token", "s3cret"],
        obj=_opts(service),
    )
    assert result.exit_code == 0, result.output
    (request,) = service.requests
    assert request.url.host == "cov.example"
    assert request.headers["authorization"] == "token s3cret"


def test_ratios_json(cli_runner: CliRunner, service: FakeCoverageService) -> None:
    result = cli_runner.invoke(cli, ["ratios", ROOT_URI, "--format", "json"], obj=_opts(service))
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"commit": 83.33, "files": {"README.md": 100.0, "dir/file.go": 75.0}}


def test_ratios_human(cli_runner: CliRunner, service: FakeCoverageService) -> None:
    result = cli_runner.invoke(cli, ["--no-color", "ratios", ROOT_URI], obj=_opts(service))
    assert result.exit_code == 0, result.output
    assert "dir/file.go" in result.output
    assert "75.0%" in result.output
    assert "gen/generated.go" not in result.output


def test_missing_root_exit_code(cli_runner: CliRunner, service: FakeCoverageService) -> None:
    result = cli_runner.invoke(cli, ["decorations", "file:///a/b"], obj=_opts(service))
    assert result.exit_code == EXIT_USAGE
    assert service.requests == []


def test_unavailable_exit_code(cli_runner: CliRunner) -> None:
    service = FakeCoverageService(error=httpx.ConnectError("refused"))
    result = cli_runner.invoke(cli, ["ratios", ROOT_URI], obj=_opts(service))
    assert result.exit_code == EXIT_UNAVAILABLE


def test_malformed_exit_code(cli_runner: CliRunner) -> None:
    service = FakeCoverageService(payload={"unexpected": True})
    result = cli_runner.invoke(cli, ["ratios", ROOT_URI], obj=_opts(service))
    assert result.exit_code == EXIT_DATAERR
