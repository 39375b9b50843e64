"""Client for the remote coverage service's commit endpoint."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx
from jsonschema import ValidationError

from coverlay import __version__
from coverlay.core.config import get_validator
from coverlay.core.uri import params_for_commit
from coverlay.errors import MalformedResponseError, RemoteUnavailableError

if TYPE_CHECKING:  # pragma: no cover
    from coverlay.core.settings import Endpoint
    from coverlay.core.uri import ResolvedLocation

logger = logging.getLogger(__name__)

CommitCoverageData = dict[str, Any]


def commit_coverage_url(location: ResolvedLocation, endpoint: Endpoint) -> str:
    p = params_for_commit(location)
    return f"{endpoint.url}/api/{p.service}/{p.owner}/{p.repo}/commits/{p.sha}"


def request_headers(endpoint: Endpoint) -> dict[str, str]:
    headers = {
        "Accept": "application/json",
        "User-Agent": f"coverlay/{__version__}",
    }
    if endpoint.token:
        headers["Authorization"] = f"token {endpoint.token}"
    return headers


async def fetch_commit_coverage(
    location: ResolvedLocation,
    endpoint: Endpoint,
    *,
    client: httpx.AsyncClient,
) -> CommitCoverageData:
    """Fetch the coverage report for *location*'s commit in a single attempt.

    Raises :class:`RemoteUnavailableError` on transport failure or a non-2xx
    reply and :class:`MalformedResponseError` when the body does not match the
    commit schema.
    """
    url = commit_coverage_url(location, endpoint)
    logger.debug("GET %s", url)
    try:
        response = await client.get(url, headers=request_headers(endpoint), params={"src": "extension"})
    except httpx.HTTPError as exc:
        msg = f"coverage service request failed: {url}: {exc}"
        raise RemoteUnavailableError(msg) from exc

    if not response.is_success:
        msg = f"coverage service returned HTTP {response.status_code} for {url}"
        raise RemoteUnavailableError(msg)

    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        msg = f"coverage service returned a non-JSON body for {url}"
        raise MalformedResponseError(msg) from exc

    try:
        get_validator("commit").validate(data)
    except ValidationError as exc:
        msg = f"unexpected coverage report shape for {url}: {exc.message}"
        raise MalformedResponseError(msg) from exc
    return data


__all__ = ["CommitCoverageData", "commit_coverage_url", "fetch_commit_coverage", "request_headers"]
