"""Mapping of document URIs to coverage locations and dashboard links."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING
from urllib.parse import quote, unquote, urlsplit

from coverlay.errors import MalformedURIError, MissingRootError

if TYPE_CHECKING:  # pragma: no cover
    from coverlay.core.settings import Endpoint

# Hosting providers the coverage service knows by a short slug.
_SERVICE_SLUGS: dict[str, str] = {
    "github.com": "gh",
    "gitlab.com": "gl",
    "bitbucket.org": "bb",
}

SELF_DESCRIBING_SCHEME = "git"


@dataclass(frozen=True, slots=True)
class ResolvedLocation:
    """A file (or, without ``path``, a whole commit) in coverage terms."""

    repo: str
    revision: str
    path: str | None = None

    @property
    def is_commit(self) -> bool:
        return self.path is None

    def commit(self) -> ResolvedLocation:
        """Return the commit-level location this file belongs to."""
        return replace(self, path=None)


@dataclass(frozen=True, slots=True)
class CommitParams:
    """Path parameters identifying a commit on the coverage service."""

    service: str
    owner: str
    repo: str
    sha: str


def resolve_location(root: ResolvedLocation | None, uri: str) -> ResolvedLocation:
    """Resolve *uri* against an optional workspace *root*.

    A self-describing URI (``<scheme>://<repo>?<revision>#<path>``) names its
    own repository and revision and wins over *root*. Any other URI only
    contributes its path.
    """
    try:
        parts = urlsplit(uri)
    except ValueError as exc:
        msg = f"malformed URI: {uri!r}"
        raise MalformedURIError(msg) from exc
    if not parts.scheme:
        msg = f"URI has no scheme: {uri!r}"
        raise MalformedURIError(msg)

    if parts.netloc and parts.query:
        repo = unquote(parts.netloc + parts.path).lstrip("/")
        return ResolvedLocation(
            repo=repo,
            revision=unquote(parts.query),
            path=unquote(parts.fragment) or None,
        )

    if root is None:
        msg = f"unable to determine repository for URI: {uri}"
        raise MissingRootError(msg)
    return ResolvedLocation(
        repo=root.repo,
        revision=root.revision,
        path=unquote(parts.path).lstrip("/") or None,
    )


def params_for_commit(location: ResolvedLocation) -> CommitParams:
    """Split ``host/owner/name`` into service parameters; missing parts are empty."""
    host, _, rest = location.repo.partition("/")
    owner, _, name = rest.partition("/")
    return CommitParams(
        service=_SERVICE_SLUGS.get(host.lower(), host),
        owner=owner,
        repo=name,
        sha=location.revision,
    )


def document_uri(root: ResolvedLocation, path: str) -> str:
    """Return the self-describing URI for *path* at *root*'s revision."""
    return f"{SELF_DESCRIBING_SCHEME}://{root.repo}?{root.revision}#{path}"


# --------------------------------------------------------------------------- #
# Dashboard links                                                             #
# --------------------------------------------------------------------------- #


def repository_url(endpoint: Endpoint, params: CommitParams) -> str:
    return f"{endpoint.url}/{params.service}/{params.owner}/{params.repo}"


def commit_url(endpoint: Endpoint, params: CommitParams) -> str:
    return f"{repository_url(endpoint, params)}/commit/{params.sha}"


def file_url(endpoint: Endpoint, params: CommitParams, path: str) -> str:
    return f"{repository_url(endpoint, params)}/src/{params.sha}/{quote(path)}"


__all__ = [
    "SELF_DESCRIBING_SCHEME",
    "CommitParams",
    "ResolvedLocation",
    "commit_url",
    "document_uri",
    "file_url",
    "params_for_commit",
    "repository_url",
    "resolve_location",
]
