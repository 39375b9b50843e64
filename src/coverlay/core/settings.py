"""Normalisation of raw user configuration into :class:`Settings`.

The host delivers whatever the user typed, possibly partial and possibly
containing URLs pasted straight from a browser. ``resolve_settings`` turns any
such mapping into a complete, defaulted value, and resolving the result again
gives back an equal value.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from coverlay.core.config import DEFAULT_ENDPOINT_URL

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A coverage-service base URL and the optional token used against it."""

    url: str = DEFAULT_ENDPOINT_URL
    token: str | None = None

    def to_raw(self) -> dict[str, Any]:
        raw: dict[str, Any] = {"url": self.url}
        if self.token is not None:
            raw["token"] = self.token
        return raw


def _default_endpoints() -> tuple[Endpoint, ...]:
    return (Endpoint(),)


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved settings; compare with ``==`` to detect meaningful changes."""

    show_line_coverage: bool = True
    show_line_hit_counts: bool = False
    hide_coverage_button: bool = False
    endpoints: tuple[Endpoint, ...] = field(default_factory=_default_endpoints)

    def to_raw(self) -> dict[str, Any]:
        """Return the raw mapping form, as the host would store it."""
        return {
            "showLineCoverage": self.show_line_coverage,
            "showLineHitCounts": self.show_line_hit_counts,
            "hideCoverageButton": self.hide_coverage_button,
            "endpoints": [ep.to_raw() for ep in self.endpoints],
        }

    def with_changes(self, **changes: Any) -> Settings:
        return replace(self, **changes)


def _url_with_only_scheme_and_host(url: str) -> str:
    """Reduce *url* to ``scheme://host[:port]``, falling back to the public service."""
    text = url.strip()
    if "://" not in text:
        text = f"https://{text}"
    try:
        parts = urlsplit(text)
        host = parts.hostname
        port = parts.port
    except ValueError:
        return DEFAULT_ENDPOINT_URL
    if not parts.scheme or not host:
        return DEFAULT_ENDPOINT_URL
    if ":" in host:
        host = f"[{host}]"
    return f"{parts.scheme.lower()}://{host}" + (f":{port}" if port is not None else "")


def _resolve_endpoint(raw: Mapping[str, Any] | Endpoint) -> Endpoint:
    if isinstance(raw, Endpoint):
        url, token = raw.url, raw.token
    else:
        url, token = raw.get("url"), raw.get("token")
    return Endpoint(
        url=_url_with_only_scheme_and_host(url) if isinstance(url, str) and url else DEFAULT_ENDPOINT_URL,
        # an empty token means "no token", never an empty credential
        token=token if isinstance(token, str) and token else None,
    )


def _resolve_endpoints(raw: Iterable[Any] | None) -> tuple[Endpoint, ...]:
    endpoints = tuple(_resolve_endpoint(ep) for ep in (raw or ()) if isinstance(ep, (Mapping, Endpoint)))
    return endpoints or _default_endpoints()


def resolve_settings(raw: Mapping[str, Any] | Settings | None) -> Settings:
    """Return a complete :class:`Settings` value for *raw*; never raises."""
    if isinstance(raw, Settings):
        raw = raw.to_raw()
    raw = raw or {}
    endpoints = raw.get("endpoints")
    return Settings(
        show_line_coverage=raw.get("showLineCoverage") is not False,
        show_line_hit_counts=raw.get("showLineHitCounts") is True,
        hide_coverage_button=raw.get("hideCoverageButton") is True,
        endpoints=_resolve_endpoints(endpoints if isinstance(endpoints, (list, tuple)) else None),
    )


def active_endpoint(settings: Settings) -> Endpoint:
    """Return the endpoint that is queried; only the first one is live."""
    return settings.endpoints[0]


__all__ = ["Endpoint", "Settings", "active_endpoint", "resolve_settings"]
