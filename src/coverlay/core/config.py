"""Central configuration and constants for ``coverlay``."""

from __future__ import annotations

import json
from functools import cache
from importlib import resources

from jsonschema import Draft202012Validator

# Public coverage service used when no endpoint is configured.
DEFAULT_ENDPOINT_URL = "https://codecov.io"

# Prefix of every settings-derived command id and context key.
NAMESPACE = "coverlay"

# Hues (degrees) at the uncovered and fully covered ends of the color scale.
RED_HUE = 0
GREEN_HUE = 120

# Seconds before a request to the coverage service is abandoned.
REQUEST_TIMEOUT = 10.0

# Default logging format used by the CLI entry point.
LOG_FORMAT = "%(levelname)s: %(message)s"


_SCHEMA_FILES: dict[str, str] = {
    "commit": "commit_schema.json",
}


@cache
def get_schema(name: str = "commit") -> dict[str, object]:
    """Load and cache a JSON schema shipped with the package."""
    try:
        filename = _SCHEMA_FILES[name]
    except KeyError as exc:
        choices = ", ".join(sorted(_SCHEMA_FILES))
        msg = f"Unsupported schema: {name!r}. Available schemas: {choices}"
        raise ValueError(msg) from exc
    return json.loads(resources.files("coverlay.data").joinpath(filename).read_text(encoding="utf-8"))


@cache
def get_validator(name: str = "commit") -> Draft202012Validator:
    """Return a checked, reusable validator for the named schema."""
    schema = get_schema(name)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


__all__ = [
    "DEFAULT_ENDPOINT_URL",
    "GREEN_HUE",
    "LOG_FORMAT",
    "NAMESPACE",
    "RED_HUE",
    "REQUEST_TIMEOUT",
    "get_schema",
    "get_validator",
]
