"""Host-facing side of coverlay: protocol types, controller and session routing."""

from coverlay.server.controller import CoverageSyncController, SynchronizationState
from coverlay.server.protocol import HostConnection
from coverlay.server.session import HostSession

__all__ = ["CoverageSyncController", "HostConnection", "HostSession", "SynchronizationState"]
