from __future__ import annotations

from typing import Any

import pytest

from coverlay.core import DEFAULT_ENDPOINT_URL, Endpoint, Settings, active_endpoint, resolve_settings

RAW_SETTINGS: list[dict[str, Any]] = [
    {},
    {"showLineCoverage": False},
    {"showLineHitCounts": True, "hideCoverageButton": True},
    {"endpoints": []},
    {"endpoints": [{"url": "https://h.example/a/b?x=1", "token": "secret"}]},
    {"endpoints": [{"url": "http://localhost:8080/gh/"}, {"url": "https://other.example", "token": ""}]},
    {"endpoints": [{"token": "only-token"}]},
    {"endpoints": "not-a-list", "unrelated": 1},
]


@pytest.mark.parametrize("raw", RAW_SETTINGS)
def test_resolve_is_idempotent(raw: dict[str, Any]) -> None:
    once = resolve_settings(raw)
    assert resolve_settings(once) == once
    assert resolve_settings(once.to_raw()) == once


def test_defaults() -> None:
    settings = resolve_settings({})
    assert settings == Settings()
    assert settings.show_line_coverage is True
    assert settings.show_line_hit_counts is False
    assert settings.hide_coverage_button is False
    assert settings.endpoints == (Endpoint(url=DEFAULT_ENDPOINT_URL, token=None),)


def test_none_is_treated_as_empty() -> None:
    assert resolve_settings(None) == resolve_settings({})


def test_flags_only_change_on_explicit_booleans() -> None:
    settings = resolve_settings({"showLineCoverage": "no", "showLineHitCounts": "yes", "hideCoverageButton": 1})
    assert settings.show_line_coverage is True
    assert settings.show_line_hit_counts is False
    assert settings.hide_coverage_button is False

    settings = resolve_settings({"showLineCoverage": False, "showLineHitCounts": True})
    assert settings.show_line_coverage is False
    assert settings.show_line_hit_counts is True


def test_endpoint_url_is_reduced_to_scheme_and_host() -> None:
    settings = resolve_settings({"endpoints": [{"url": "https://h.example/a/b?x=1#frag"}]})
    assert settings.endpoints[0].url == "https://h.example"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("http://localhost:8080/api/", "http://localhost:8080"),
        ("https://user:pw@H.Example/path", "https://h.example"),
        ("codecov.example.com/gh/owner", "https://codecov.example.com"),
        ("", DEFAULT_ENDPOINT_URL),
        ("https://", DEFAULT_ENDPOINT_URL),
        ("http://[::1", DEFAULT_ENDPOINT_URL),
    ],
)
def test_endpoint_url_edge_cases(url: str, expected: str) -> None:
    assert resolve_settings({"endpoints": [{"url": url}]}).endpoints[0].url == expected


def test_empty_token_means_no_token() -> None:
    settings = resolve_settings({"endpoints": [{"url": "https://h.example", "token": ""}]})
    assert settings.endpoints[0].token is None
    assert "token" not in settings.endpoints[0].to_raw()


def test_token_passes_through() -> None:
    settings = resolve_settings({"endpoints": [{"url": "https://h.example", "token": "abc"}]})
    assert settings.endpoints[0] == Endpoint(url="https://h.example", token="abc")


def test_only_first_endpoint_is_active() -> None:
    settings = resolve_settings({"endpoints": [{"url": "https://first.example"}, {"url": "https://second.example"}]})
    assert len(settings.endpoints) == 2
    assert active_endpoint(settings).url == "https://first.example"


def test_equal_settings_from_different_raw_values() -> None:
    assert resolve_settings({"showLineHitCounts": False, "endpoints": []}) == resolve_settings({})
    assert resolve_settings({"showLineHitCounts": True}) != resolve_settings({})


def test_with_changes_returns_new_value() -> None:
    settings = Settings()
    toggled = settings.with_changes(show_line_hit_counts=True)
    assert toggled.show_line_hit_counts is True
    assert settings.show_line_hit_counts is False
