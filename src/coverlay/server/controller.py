"""Session controller keeping decorations and the context store in sync.

One :class:`CoverageSyncController` exists per host session. The host delivers
events one at a time; each handler may suspend on a fetch but is never
interleaved with another handler's state changes. Work that needs a round trip
through the host (input prompts, configuration updates) runs as a detached
task, because the host cannot answer it until the current handler returns.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from coverlay.core.config import NAMESPACE
from coverlay.core.decorations import coverage_color, to_decorations
from coverlay.core.model import (
    CoverageModel,
    commit_coverage_ratio,
    file_coverage_ratio,
    file_coverage_ratios,
    file_line_coverage,
)
from coverlay.core.settings import Settings, active_endpoint, resolve_settings
from coverlay.core.uri import (
    ResolvedLocation,
    commit_url,
    document_uri,
    file_url,
    params_for_commit,
    repository_url,
    resolve_location,
)
from coverlay.errors import (
    AlreadyInitializedError,
    CoverageServiceError,
    LocationError,
    MissingRootError,
    UnknownCommandError,
)
from coverlay.server.contributions import (
    SET_API_TOKEN_COMMAND_ID,
    TOGGLE_COVERAGE_DECORATIONS_COMMAND_ID,
    TOGGLE_HITS_DECORATIONS_COMMAND_ID,
    server_capabilities,
)
from coverlay.server.protocol import (
    ConfigurationUpdateParams,
    ContextValue,
    InitializeParams,
    InitializeResult,
    PublishDecorationsParams,
    TextDocumentIdentifier,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Coroutine, Mapping, Sequence

    from coverlay.api import CommitCoverageData
    from coverlay.server.protocol import HostConnection

logger = logging.getLogger(__name__)

TOKEN_SETTING_PATH: list[str | int] = ["endpoints", 0, "token"]

# command id -> (Settings attribute, raw settings key)
_TOGGLES: dict[str, tuple[str, str]] = {
    TOGGLE_COVERAGE_DECORATIONS_COMMAND_ID: ("show_line_coverage", "showLineCoverage"),
    TOGGLE_HITS_DECORATIONS_COMMAND_ID: ("show_line_hit_counts", "showLineHitCounts"),
}


def context_key(prop: str, suffix: str | None = None) -> str:
    key = f"{NAMESPACE}.{prop}"
    return f"{key}.{suffix}" if suffix else key


@dataclass(slots=True)
class SynchronizationState:
    initialized: bool = False
    root: ResolvedLocation | None = None
    settings: Settings = field(default_factory=Settings)
    last_opened_document: str | None = None


class CoverageSyncController:
    def __init__(self, connection: HostConnection, model: CoverageModel | None = None) -> None:
        self._connection = connection
        self._model = model or CoverageModel()
        self._detached: set[asyncio.Task[None]] = set()
        self.state = SynchronizationState()

    # --------------------------- Diagnostics ---------------------------------
    def _log(self, message: str) -> None:
        logger.info(message)
        self._connection.log_message(message)

    def _error(self, message: str) -> None:
        logger.error(message)
        self._connection.log_error(message)

    # --------------------------- Lifecycle -----------------------------------
    def initialize(self, params: InitializeParams) -> InitializeResult:
        """Handle the initialize handshake; a second handshake is a programming error."""
        if self.state.initialized:
            msg = "already initialized"
            raise AlreadyInitializedError(msg)

        root: ResolvedLocation | None = None
        root_uri = params.original_root_uri or params.root_uri
        if root_uri:
            try:
                root = resolve_location(None, root_uri).commit()
            except LocationError as exc:
                self._log(f"Workspace root {root_uri} has no coverage location: {exc}")

        settings = resolve_settings(params.initialization_options.settings.merged)
        self.state = SynchronizationState(initialized=True, root=root, settings=settings)
        return InitializeResult(capabilities=server_capabilities())

    async def initialized(self) -> None:
        await self.refresh_context()

    async def aclose(self) -> None:
        """Wait for detached work to finish and release the HTTP client."""
        while self._detached:
            await asyncio.gather(*tuple(self._detached), return_exceptions=True)
        await self._model.aclose()

    # --------------------------- Events --------------------------------------
    def _ready(self, event: str) -> bool:
        if not self.state.initialized:
            logger.debug("ignoring %s before initialize", event)
        return self.state.initialized

    async def did_change_configuration(self, raw: Mapping[str, Any]) -> None:
        if not self._ready("configuration change"):
            return
        new_settings = resolve_settings(raw)
        old_settings = self.state.settings
        if new_settings == old_settings:
            return  # nothing to do

        self.state.settings = new_settings
        # Don't bother updating client view state if there is no document yet.
        if self.state.last_opened_document is not None:
            await self.publish_decorations(self.state.last_opened_document, new_settings)

        if new_settings.endpoints != old_settings.endpoints:
            await self.refresh_context()

    async def did_open(self, uri: str) -> None:
        if not self._ready(f"open of {uri}"):
            return
        self.state.last_opened_document = uri
        result = await self.publish_decorations(uri, self.state.settings)
        if result is None:
            return
        location, data = result
        ratio = file_coverage_ratio(data, location.path or "")
        if ratio is None:
            self._log("File coverage ratio: unknown")
            return
        self._log(f"File coverage ratio: {ratio:.0f}%")
        logger.debug("coverage indicator color for %s: %s", uri, coverage_color(ratio))

    def did_close(self, uri: str) -> None:
        if not self._ready(f"close of {uri}"):
            return
        if self.state.last_opened_document == uri:
            self.state.last_opened_document = None

    async def execute_command(self, command: str, arguments: Sequence[Any] = ()) -> None:
        """Start *command*; host round trips it needs run detached from this call."""
        if not self._ready(f"command {command}"):
            return
        if command == SET_API_TOKEN_COMMAND_ID:
            self._detach(self._prompt_for_token(), command)
        elif command in _TOGGLES:
            self._toggle(*_TOGGLES[command])
        else:
            msg = f"unknown command: {command}"
            raise UnknownCommandError(msg)
        if arguments:
            logger.debug("ignoring arguments for %s: %r", command, list(arguments))

    # --------------------------- Commands ------------------------------------
    def _toggle(self, attr: str, setting: str) -> None:
        value = not getattr(self.state.settings, attr)
        self.state.settings = self.state.settings.with_changes(**{attr: value})
        self._detach(
            self._connection.request_configuration_update(ConfigurationUpdateParams(path=[setting], value=value)),
            "configuration/update",
        )
        if self.state.last_opened_document is not None:
            self._detach(
                self.publish_decorations(self.state.last_opened_document, self.state.settings),
                "publishDecorations",
            )

    async def _prompt_for_token(self) -> None:
        endpoint = active_endpoint(self.state.settings)
        token = await self._connection.show_input_request(
            f"Coverage API token (for private repositories on {endpoint.url}):",
            endpoint.token,
        )
        if token is None:
            return  # cancelled
        await self._connection.request_configuration_update(
            # "" removes the token
            ConfigurationUpdateParams(path=TOKEN_SETTING_PATH, value=token or None)
        )

    def _detach(self, coro: Coroutine[Any, Any, Any], what: str) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._run_detached(coro, what))
        self._detached.add(task)
        task.add_done_callback(self._detached.discard)
        return task

    async def _run_detached(self, coro: Coroutine[Any, Any, Any], what: str) -> None:
        try:
            await coro
        except Exception as exc:  # noqa: BLE001 - nothing else awaits this task
            self._error(f"{what}: {exc}")

    # --------------------------- Decorations ---------------------------------
    async def publish_decorations(
        self, uri: str, settings: Settings
    ) -> tuple[ResolvedLocation, CommitCoverageData] | None:
        """Fetch coverage for *uri* and publish its decorations.

        Returns the location and report used, or ``None`` when nothing could
        be published.
        """
        try:
            location = resolve_location(self.state.root, uri)
        except MissingRootError as exc:
            logger.debug("skipping %s: %s", uri, exc)
            return None
        except LocationError as exc:
            self._error(f"Error resolving coverage location for {uri}: {exc}")
            return None
        if location.path is None:
            logger.debug("%s names a commit, not a file; no decorations", uri)
            return None

        try:
            data = await self._model.fetch(location, settings)
        except CoverageServiceError as exc:
            self._error(f"Error loading coverage for {uri}: {exc}")
            return None

        decorations = to_decorations(settings, file_line_coverage(data, location.path))
        self._connection.publish_decorations(
            PublishDecorationsParams(
                text_document=TextDocumentIdentifier(uri=uri),
                decorations=[d.to_wire() for d in decorations],
            )
        )
        return location, data

    # --------------------------- Context -------------------------------------
    async def refresh_context(self) -> None:
        """Recompute the dashboard links and coverage ratios in the context store."""
        root = self.state.root
        if root is None:
            return

        settings = self.state.settings
        endpoint = active_endpoint(settings)
        params = params_for_commit(root)
        context: dict[str, ContextValue] = {
            context_key("repoURL"): repository_url(endpoint, params),
            context_key("commitURL"): commit_url(endpoint, params),
        }

        try:
            data = await self._model.fetch(root, settings)
        except CoverageServiceError as exc:
            self._error(f"Error loading file coverage: {exc}")
        else:
            commit_ratio = commit_coverage_ratio(data)
            context[context_key("commitCoverage")] = f"{commit_ratio:.1f}" if commit_ratio is not None else None
            for path, ratio in file_coverage_ratios(data).items():
                uri = document_uri(root, path)
                context.update({
                    context_key("coverageRatio", uri): str(math.floor(ratio)),
                    context_key("fileURL", uri): file_url(endpoint, params, path),
                })

        self._connection.update_context(context)


__all__ = ["TOKEN_SETTING_PATH", "CoverageSyncController", "SynchronizationState", "context_key"]
