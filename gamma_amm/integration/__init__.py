"""
Pool engine integration layer
"""

from .engine import BlockContext, PoolEngine
from .event_log import EventLog
from .oracle import InMemoryOracle, OracleCollaborator
from .store import PoolStore
from .transfers import InMemoryTransferLedger, TransferCollaborator, TransferError, TransferRecord

__all__ = [
    "BlockContext",
    "PoolEngine",
    "EventLog",
    "InMemoryOracle",
    "OracleCollaborator",
    "PoolStore",
    "InMemoryTransferLedger",
    "TransferCollaborator",
    "TransferError",
    "TransferRecord",
]
