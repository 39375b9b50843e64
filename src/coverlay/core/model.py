"""Coverage data from the remote service and the views derived from it.

Every read fetches the commit report afresh and derives one view from it:

  * the commit-wide coverage ratio
  * the per-file ratio table
  * the per-line hit/branch map of one file

Parsing is lenient where the report is merely incomplete (a missing file, a
ratio that is not a number) and strict only where the schema is violated, which
the fetch layer reports as :class:`~coverlay.errors.MalformedResponseError`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, TypeAlias

import httpx

from coverlay.api import fetch_commit_coverage
from coverlay.core.config import REQUEST_TIMEOUT
from coverlay.core.settings import active_endpoint

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping
    from types import TracebackType

    from coverlay.api import CommitCoverageData
    from coverlay.core.settings import Settings
    from coverlay.core.uri import ResolvedLocation

logger = logging.getLogger(__name__)


# --------------------------- Models ------------------------------------------
class LineKind(StrEnum):
    """The four states a line can be in within a coverage report."""

    NOT_INSTRUMENTED = "not-instrumented"  # absent from the report
    NO_DATA = "no-data"  # present, explicitly null
    STATEMENT = "statement"
    BRANCH = "branch"


@dataclass(frozen=True, slots=True)
class LineCoverage:
    kind: LineKind
    hits: int = 0
    branches: int = 0

    @classmethod
    def statement(cls, hits: int) -> LineCoverage:
        return cls(LineKind.STATEMENT, hits=hits)

    @classmethod
    def branch(cls, hits: int, branches: int) -> LineCoverage:
        return cls(LineKind.BRANCH, hits=hits, branches=branches)

    @property
    def has_data(self) -> bool:
        return self.kind in {LineKind.STATEMENT, LineKind.BRANCH}

    def label(self) -> str:
        """Return ``hits`` or ``hits/branches``; empty when there is no data."""
        if self.kind is LineKind.STATEMENT:
            return str(self.hits)
        if self.kind is LineKind.BRANCH:
            return f"{self.hits}/{self.branches}"
        return ""


NOT_INSTRUMENTED = LineCoverage(LineKind.NOT_INSTRUMENTED)
NO_DATA = LineCoverage(LineKind.NO_DATA)

FileLineCoverage: TypeAlias = dict[int, LineCoverage]
"""1-based line number to coverage; lines absent from the report are absent here."""


def line_coverage_at(coverage: Mapping[int, LineCoverage], line: int) -> LineCoverage:
    return coverage.get(line, NOT_INSTRUMENTED)


# --------------------------- Parsing -----------------------------------------
def parse_ratio(value: object) -> float | None:
    """Parse a decimal percentage; anything unparsable is treated as absent."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        ratio = float(value)
    elif isinstance(value, str):
        try:
            ratio = float(value.strip().rstrip("%"))
        except ValueError:
            return None
    else:
        return None
    return ratio if math.isfinite(ratio) else None


def decode_line_value(value: int | str | None) -> LineCoverage:
    """Decode one line entry of the report (``3``, ``"2/4"`` or ``null``)."""
    if value is None:
        return NO_DATA
    if isinstance(value, str):
        hits, _, branches = value.partition("/")
        return LineCoverage.branch(int(hits), int(branches))
    return LineCoverage.statement(int(value))


def decode_line_values(raw: Mapping[str, Any]) -> FileLineCoverage:
    result: FileLineCoverage = {}
    for line_str, value in raw.items():
        try:
            line = int(line_str)
        except ValueError:
            logger.debug("skipping non-numeric line key %r", line_str)
            continue
        if line < 1:
            logger.debug("skipping out-of-range line %d", line)
            continue
        result[line] = decode_line_value(value)
    return result


def _files(data: CommitCoverageData) -> dict[str, Any]:
    return data["commit"]["report"]["files"]


def _totals_ratio(totals: Mapping[str, Any] | None) -> float | None:
    return parse_ratio(totals.get("c")) if totals else None


def commit_coverage_ratio(data: CommitCoverageData) -> float | None:
    return _totals_ratio(data["commit"].get("totals"))


def file_line_coverage(data: CommitCoverageData, path: str) -> FileLineCoverage:
    file_data = _files(data).get(path)
    if not file_data:
        return {}
    return decode_line_values(file_data["l"])


def file_coverage_ratio(data: CommitCoverageData, path: str) -> float | None:
    file_data = _files(data).get(path)
    return _totals_ratio(file_data.get("t")) if file_data else None


def file_coverage_ratios(data: CommitCoverageData) -> dict[str, float]:
    ratios: dict[str, float] = {}
    for path, file_data in _files(data).items():
        ratio = _totals_ratio(file_data.get("t"))
        if ratio is not None:
            ratios[path] = ratio
    return ratios


# --------------------------- Model -------------------------------------------
class CoverageModel:
    """Asynchronous reads of coverage data for the active endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport)

    async def __aenter__(self) -> CoverageModel:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, location: ResolvedLocation, settings: Settings) -> CommitCoverageData:
        return await fetch_commit_coverage(location.commit(), active_endpoint(settings), client=self._client)

    async def get_commit_coverage_ratio(self, location: ResolvedLocation, settings: Settings) -> float | None:
        """Return the commit-wide ratio, or ``None`` when the service reports none."""
        return commit_coverage_ratio(await self.fetch(location, settings))

    async def get_file_line_coverage(self, location: ResolvedLocation, settings: Settings) -> FileLineCoverage:
        """Return line coverage for the file at *location* (empty if the report lacks it)."""
        if location.path is None:
            msg = f"line coverage needs a file location, got commit {location.repo}@{location.revision}"
            raise ValueError(msg)
        return file_line_coverage(await self.fetch(location, settings), location.path)

    async def get_file_coverage_ratio(self, location: ResolvedLocation, settings: Settings) -> float | None:
        if location.path is None:
            return None
        return file_coverage_ratio(await self.fetch(location, settings), location.path)

    async def get_file_coverage_ratios(self, location: ResolvedLocation, settings: Settings) -> dict[str, float]:
        """Return ``path -> ratio`` for every file with a parsable ratio."""
        return file_coverage_ratios(await self.fetch(location, settings))


__all__ = [
    "NOT_INSTRUMENTED",
    "NO_DATA",
    "CoverageModel",
    "FileLineCoverage",
    "LineCoverage",
    "LineKind",
    "commit_coverage_ratio",
    "decode_line_value",
    "decode_line_values",
    "file_coverage_ratio",
    "file_coverage_ratios",
    "file_line_coverage",
    "line_coverage_at",
    "parse_ratio",
]
