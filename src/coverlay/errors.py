"""Centralised exception hierarchy for coverlay."""

from __future__ import annotations


class CoverlayError(Exception):
    """Base class for all custom coverlay exceptions."""


class AlreadyInitializedError(CoverlayError):
    """The session received a second initialize handshake."""


class LocationError(CoverlayError):
    """Base class for errors resolving a document URI into a coverage location."""


class MalformedURIError(LocationError):
    """The URI could not be split into scheme, authority and path."""


class MissingRootError(LocationError):
    """The URI does not name a repository and no workspace root is known."""


class CoverageServiceError(CoverlayError):
    """Base class for errors talking to the remote coverage service."""


class RemoteUnavailableError(CoverageServiceError):
    """Transport failure or non-2xx reply from the coverage service."""


class MalformedResponseError(CoverageServiceError):
    """The coverage service replied with a body that does not match the commit schema."""


class ProtocolError(CoverlayError):
    """Base class for errors in host requests."""


class UnknownCommandError(ProtocolError):
    """An execute-command request named a command this server does not provide."""


class UnknownMethodError(ProtocolError):
    """The host sent a method this server does not handle."""


__all__ = [
    "AlreadyInitializedError",
    "CoverageServiceError",
    "CoverlayError",
    "LocationError",
    "MalformedResponseError",
    "MalformedURIError",
    "MissingRootError",
    "ProtocolError",
    "RemoteUnavailableError",
    "UnknownCommandError",
    "UnknownMethodError",
]
