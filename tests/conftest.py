from __future__ import annotations

import asyncio
import copy
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from coverlay.core.model import CoverageModel
from coverlay.server.protocol import ConfigurationUpdateParams, PublishDecorationsParams

ROOT_URI = "git://github.com/owner/name?abc123"
FILE_URI = f"{ROOT_URI}#dir/file.go"

COMMIT_REPORT: dict[str, Any] = {
    "commit": {
        "totals": {"c": "83.33"},
        "report": {
            "files": {
                "dir/file.go": {
                    "l": {"12": 3, "13": "2/4", "14": None, "15": 0},
                    "t": {"c": "75.00000"},
                },
                "gen/generated.go": {"l": {"1": 1}, "t": {"c": "n/a"}},
                "README.md": {"l": {"1": 1}, "t": {"c": "100"}},
            }
        },
    }
}


def commit_report() -> dict[str, Any]:
    return copy.deepcopy(COMMIT_REPORT)


class FakeCoverageService:
    """Coverage service double served through ``httpx.MockTransport``."""

    def __init__(
        self,
        payload: Any = None,
        *,
        status: int = 200,
        body: bytes | None = None,
        error: Exception | None = None,
    ) -> None:
        self.payload = commit_report() if payload is None else payload
        self.status = status
        self.body = body
        self.error = error
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.body is not None:
            return httpx.Response(self.status, content=self.body)
        return httpx.Response(self.status, json=self.payload)

    def model(self) -> CoverageModel:
        return CoverageModel(transport=self.transport)


class FakeHost:
    """Records everything the controller sends to the host."""

    def __init__(self, *, input_response: str | None = None, input_error: Exception | None = None) -> None:
        self.published: list[PublishDecorationsParams] = []
        self.contexts: list[dict[str, Any]] = []
        self.config_updates: list[ConfigurationUpdateParams] = []
        self.messages: list[str] = []
        self.errors: list[str] = []
        self.prompts: list[tuple[str, str | None]] = []
        self.input_response = input_response
        self.input_error = input_error
        self.input_gate: asyncio.Event | None = None

    def publish_decorations(self, params: PublishDecorationsParams) -> None:
        self.published.append(params)

    def update_context(self, context: dict[str, Any]) -> None:
        self.contexts.append(dict(context))

    def log_message(self, message: str) -> None:
        self.messages.append(message)

    def log_error(self, message: str) -> None:
        self.errors.append(message)

    async def request_configuration_update(self, params: ConfigurationUpdateParams) -> None:
        self.config_updates.append(params)

    async def show_input_request(self, message: str, default_value: str | None) -> str | None:
        self.prompts.append((message, default_value))
        if self.input_gate is not None:
            await self.input_gate.wait()
        if self.input_error is not None:
            raise self.input_error
        return self.input_response


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Click CLI runner for invoking the command-line interface."""
    return CliRunner()


@pytest.fixture
def service() -> FakeCoverageService:
    return FakeCoverageService()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()
