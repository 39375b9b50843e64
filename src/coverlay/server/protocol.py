"""
Typed objects exchanged with the editor host.

*The models mirror the host's camelCase JSON while exposing snake_case
attributes to Python callers; unknown fields sent by the host are ignored.*
"""

from __future__ import annotations

from typing import Any, Protocol, TypeAlias

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ContextValue: TypeAlias = str | int | float | bool | None

# --------------------------------------------------------------------------- #
# Primitives                                                                  #
# --------------------------------------------------------------------------- #


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TextDocumentIdentifier(WireModel):
    uri: str


class TextDocumentItem(TextDocumentIdentifier):
    language_id: str | None = None
    version: int | None = None
    text: str | None = None


class SettingsCascade(WireModel):
    merged: dict[str, Any] = Field(default_factory=dict)


class InitializationOptions(WireModel):
    settings: SettingsCascade = Field(default_factory=SettingsCascade)


# --------------------------------------------------------------------------- #
# Requests and notifications from the host                                    #
# --------------------------------------------------------------------------- #


class InitializeParams(WireModel):
    root_uri: str | None = None
    # set by proxying hosts; names the repository/revision the root stands for
    original_root_uri: str | None = None
    initialization_options: InitializationOptions = Field(default_factory=InitializationOptions)


class DidChangeConfigurationParams(WireModel):
    configuration_cascade: SettingsCascade = Field(default_factory=SettingsCascade)


class DidOpenTextDocumentParams(WireModel):
    text_document: TextDocumentItem


class DidCloseTextDocumentParams(WireModel):
    text_document: TextDocumentIdentifier


class ExecuteCommandParams(WireModel):
    command: str
    arguments: list[Any] = Field(default_factory=list)


# --------------------------------------------------------------------------- #
# Messages sent to the host                                                   #
# --------------------------------------------------------------------------- #


class PublishDecorationsParams(WireModel):
    text_document: TextDocumentIdentifier
    decorations: list[dict[str, Any]]


class ConfigurationUpdateParams(WireModel):
    """A single settings edit; ``None`` (or ``""``) as *value* unsets the path."""

    path: list[str | int]
    value: Any = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ActionItem(WireModel):
    label: str
    description: str | None = None


class Action(WireModel):
    id: str
    command: str
    title: str
    category: str | None = None
    command_arguments: list[Any] | None = None
    action_item: ActionItem | None = None


class MenuItem(WireModel):
    action: str
    when: str | None = None


class Contributions(WireModel):
    actions: list[Action] = Field(default_factory=list)
    menus: dict[str, list[MenuItem]] = Field(default_factory=dict)


class TextDocumentSyncOptions(WireModel):
    open_close: bool = True


class ExecuteCommandOptions(WireModel):
    commands: list[str]


class DecorationOptions(WireModel):
    dynamic: bool = True


class ServerCapabilities(WireModel):
    text_document_sync: TextDocumentSyncOptions = Field(default_factory=TextDocumentSyncOptions)
    execute_command_provider: ExecuteCommandOptions
    decoration_provider: DecorationOptions = Field(default_factory=DecorationOptions)
    contributions: Contributions = Field(default_factory=Contributions)


class InitializeResult(WireModel):
    capabilities: ServerCapabilities


# --------------------------------------------------------------------------- #
# Connection                                                                  #
# --------------------------------------------------------------------------- #


class HostConnection(Protocol):
    """The channel to the host, as seen by the controller.

    Notifications are synchronous; the two requests are round trips over the
    same channel that delivers events, so they must not be awaited from inside
    the handler of an event.
    """

    def publish_decorations(self, params: PublishDecorationsParams) -> None: ...

    def update_context(self, context: dict[str, ContextValue]) -> None: ...

    def log_message(self, message: str) -> None: ...

    def log_error(self, message: str) -> None: ...

    async def request_configuration_update(self, params: ConfigurationUpdateParams) -> None: ...

    async def show_input_request(self, message: str, default_value: str | None) -> str | None: ...


__all__ = [
    "Action",
    "ActionItem",
    "ConfigurationUpdateParams",
    "ContextValue",
    "Contributions",
    "DecorationOptions",
    "DidChangeConfigurationParams",
    "DidCloseTextDocumentParams",
    "DidOpenTextDocumentParams",
    "ExecuteCommandOptions",
    "ExecuteCommandParams",
    "HostConnection",
    "InitializationOptions",
    "InitializeParams",
    "InitializeResult",
    "MenuItem",
    "PublishDecorationsParams",
    "ServerCapabilities",
    "SettingsCascade",
    "TextDocumentIdentifier",
    "TextDocumentItem",
    "TextDocumentSyncOptions",
]
