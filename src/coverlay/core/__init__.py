"""Settings, locations, coverage views and decorations.

The coverage model and decoration mapper live in ``coverlay.core.model`` and
``coverlay.core.decorations``; they depend on the HTTP client and are imported
from there directly.
"""

from coverlay.core.config import DEFAULT_ENDPOINT_URL, LOG_FORMAT, NAMESPACE, get_schema
from coverlay.core.settings import Endpoint, Settings, active_endpoint, resolve_settings
from coverlay.core.uri import (
    CommitParams,
    ResolvedLocation,
    commit_url,
    document_uri,
    file_url,
    params_for_commit,
    repository_url,
    resolve_location,
)

__all__ = [
    "DEFAULT_ENDPOINT_URL",
    "LOG_FORMAT",
    "NAMESPACE",
    "CommitParams",
    "Endpoint",
    "ResolvedLocation",
    "Settings",
    "active_endpoint",
    "commit_url",
    "document_uri",
    "file_url",
    "get_schema",
    "params_for_commit",
    "repository_url",
    "resolve_location",
    "resolve_settings",
]
