"""Routing of host methods to the session controller."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from coverlay.errors import UnknownMethodError
from coverlay.server.controller import CoverageSyncController
from coverlay.server.protocol import (
    DidChangeConfigurationParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    ExecuteCommandParams,
    InitializeParams,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Awaitable, Callable, Mapping

    from coverlay.core.model import CoverageModel
    from coverlay.server.protocol import HostConnection

    Handler = Callable[[Mapping[str, Any]], Awaitable[Any]]

logger = logging.getLogger(__name__)


class HostSession:
    """Validates host messages and hands them to a :class:`CoverageSyncController`.

    The host awaits :meth:`handle` for one message before delivering the next.
    Requests return a JSON-ready result; notifications return ``None``.
    """

    def __init__(self, connection: HostConnection, model: CoverageModel | None = None) -> None:
        self.controller = CoverageSyncController(connection, model)
        self._handlers: dict[str, Handler] = {
            "initialize": self._initialize,
            "initialized": self._initialized,
            "workspace/didChangeConfiguration": self._did_change_configuration,
            "textDocument/didOpen": self._did_open,
            "textDocument/didClose": self._did_close,
            "workspace/executeCommand": self._execute_command,
            "shutdown": self._shutdown,
        }

    @property
    def methods(self) -> list[str]:
        return sorted(self._handlers)

    async def handle(self, method: str, params: Mapping[str, Any] | None = None) -> Any:
        try:
            handler = self._handlers[method]
        except KeyError as exc:
            msg = f"unknown method: {method}"
            raise UnknownMethodError(msg) from exc
        logger.debug("<- %s", method)
        return await handler(params or {})

    async def _initialize(self, params: Mapping[str, Any]) -> dict[str, Any]:
        result = self.controller.initialize(InitializeParams.model_validate(params))
        return result.to_wire()

    async def _initialized(self, _params: Mapping[str, Any]) -> None:
        await self.controller.initialized()

    async def _did_change_configuration(self, params: Mapping[str, Any]) -> None:
        parsed = DidChangeConfigurationParams.model_validate(params)
        # merged is (global + organization + user) settings
        await self.controller.did_change_configuration(parsed.configuration_cascade.merged)

    async def _did_open(self, params: Mapping[str, Any]) -> None:
        parsed = DidOpenTextDocumentParams.model_validate(params)
        await self.controller.did_open(parsed.text_document.uri)

    async def _did_close(self, params: Mapping[str, Any]) -> None:
        parsed = DidCloseTextDocumentParams.model_validate(params)
        self.controller.did_close(parsed.text_document.uri)

    async def _execute_command(self, params: Mapping[str, Any]) -> None:
        parsed = ExecuteCommandParams.model_validate(params)
        await self.controller.execute_command(parsed.command, parsed.arguments)

    async def _shutdown(self, _params: Mapping[str, Any]) -> None:
        await self.controller.aclose()


__all__ = ["HostSession"]
