"""State/store layer.

This package is the single owner of the aggregate snapshot: the latest
transport, weather and electricity records plus the call history, the
captured application log and the latest device metrics sample.
"""

from raspinfo.state.sections import Domain
from raspinfo.state.store import APP_LOG_CAPACITY, CALL_HISTORY_CAPACITY, SnapshotStore

__all__ = ["APP_LOG_CAPACITY", "CALL_HISTORY_CAPACITY", "Domain", "SnapshotStore"]
