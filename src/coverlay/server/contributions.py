"""Declarative UI actions and menus contributed to the host.

The ``${...}`` and ``when`` expressions are evaluated by the host against the
user's settings and the context store; the server's only job is to keep the
context keys referenced here accurate.
"""

from __future__ import annotations

from coverlay.core.config import NAMESPACE
from coverlay.server.protocol import (
    Action,
    ActionItem,
    Contributions,
    ExecuteCommandOptions,
    MenuItem,
    ServerCapabilities,
)

TOGGLE_COVERAGE_DECORATIONS_COMMAND_ID = f"{NAMESPACE}.decorations.coverage.toggle"
TOGGLE_HITS_DECORATIONS_COMMAND_ID = f"{NAMESPACE}.decorations.hits.toggle"
SET_API_TOKEN_COMMAND_ID = f"{NAMESPACE}.setAPIToken"

VIEW_FILE_COVERAGE_ACTION_ID = f"{NAMESPACE}.link.file"
VIEW_COMMIT_COVERAGE_ACTION_ID = f"{NAMESPACE}.link.commit"
VIEW_REPO_COVERAGE_ACTION_ID = f"{NAMESPACE}.link.repository"
HELP_ACTION_ID = f"{NAMESPACE}.help"

HELP_URL = "https://docs.codecov.io"

COMMANDS: tuple[str, ...] = (
    TOGGLE_COVERAGE_DECORATIONS_COMMAND_ID,
    TOGGLE_HITS_DECORATIONS_COMMAND_ID,
    SET_API_TOKEN_COMMAND_ID,
)

_CATEGORY = "Coverage"
_FILE_RATIO = f"get(context, `{NAMESPACE}.coverageRatio.${{resource.uri}}`)"
_FILE_URL = f"get(context, `{NAMESPACE}.fileURL.${{resource.uri}}`)"


def _actions() -> list[Action]:
    return [
        Action(
            id=TOGGLE_COVERAGE_DECORATIONS_COMMAND_ID,
            command=TOGGLE_COVERAGE_DECORATIONS_COMMAND_ID,
            title='${config.showLineCoverage && "Hide" || "Show"} code coverage decorations on file',
            category=_CATEGORY,
            action_item=ActionItem(
                label=f"Coverage: ${{{_FILE_RATIO}}}%",
                description='${config.showLineCoverage && "Hide" || "Show"} code coverage',
            ),
        ),
        Action(
            id=TOGGLE_HITS_DECORATIONS_COMMAND_ID,
            command=TOGGLE_HITS_DECORATIONS_COMMAND_ID,
            title='${config.showLineHitCounts && "Hide" || "Show"} line hit/branch counts',
            category=_CATEGORY,
        ),
        Action(
            id=VIEW_FILE_COVERAGE_ACTION_ID,
            command="open",
            command_arguments=[f"${{{_FILE_URL}}}"],
            title="View file coverage report",
            category=_CATEGORY,
        ),
        Action(
            id=VIEW_COMMIT_COVERAGE_ACTION_ID,
            command="open",
            command_arguments=[f"${{{NAMESPACE}.commitURL}}"],
            title=(
                f"View commit report${{{NAMESPACE}.commitCoverage && "
                f'` (${{{NAMESPACE}.commitCoverage}}% coverage)` || ""}}'
            ),
            category=_CATEGORY,
        ),
        Action(
            id=VIEW_REPO_COVERAGE_ACTION_ID,
            command="open",
            command_arguments=[f"${{{NAMESPACE}.repoURL}}"],
            title="View repository coverage dashboard",
            category=_CATEGORY,
        ),
        Action(
            id=SET_API_TOKEN_COMMAND_ID,
            command=SET_API_TOKEN_COMMAND_ID,
            title="Set API token for private repositories",
            category=_CATEGORY,
        ),
        Action(
            id=HELP_ACTION_ID,
            command="open",
            command_arguments=[HELP_URL],
            title="Documentation and support",
            category=_CATEGORY,
        ),
    ]


def _menus() -> dict[str, list[MenuItem]]:
    return {
        "editor/title": [
            MenuItem(
                action=TOGGLE_COVERAGE_DECORATIONS_COMMAND_ID,
                when=f"!config.hideCoverageButton && {_FILE_RATIO}",
            ),
        ],
        "commandPalette": [
            MenuItem(action=TOGGLE_COVERAGE_DECORATIONS_COMMAND_ID),
            MenuItem(action=TOGGLE_HITS_DECORATIONS_COMMAND_ID),
            MenuItem(action=VIEW_FILE_COVERAGE_ACTION_ID, when=_FILE_URL),
            MenuItem(action=VIEW_COMMIT_COVERAGE_ACTION_ID, when=f"{NAMESPACE}.commitURL"),
            MenuItem(action=VIEW_REPO_COVERAGE_ACTION_ID, when=f"{NAMESPACE}.repoURL"),
            MenuItem(action=SET_API_TOKEN_COMMAND_ID),
        ],
        "help": [MenuItem(action=HELP_ACTION_ID)],
    }


def server_capabilities() -> ServerCapabilities:
    return ServerCapabilities(
        execute_command_provider=ExecuteCommandOptions(commands=list(COMMANDS)),
        contributions=Contributions(actions=_actions(), menus=_menus()),
    )


__all__ = [
    "COMMANDS",
    "HELP_ACTION_ID",
    "SET_API_TOKEN_COMMAND_ID",
    "TOGGLE_COVERAGE_DECORATIONS_COMMAND_ID",
    "TOGGLE_HITS_DECORATIONS_COMMAND_ID",
    "VIEW_COMMIT_COVERAGE_ACTION_ID",
    "VIEW_FILE_COVERAGE_ACTION_ID",
    "VIEW_REPO_COVERAGE_ACTION_ID",
    "server_capabilities",
]
