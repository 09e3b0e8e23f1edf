"""
Storage module for Loadout.

SQLite persistence for terminal fault markers written by the process
supervisor. Markers are committed synchronously so they outlive the
process that recorded them.
"""

from loadout.store.db import FaultLog, FaultStore, generate_id

__all__ = [
    "FaultLog",
    "FaultStore",
    "generate_id",
]
