"""
VaultWard Pending Operation Storage

Components:
- PendingOperationStore: interface shared by the middleware and the handshake
- InMemoryPendingOperationStore: lock-guarded in-process implementation
"""

from vaultward.store.pending import InMemoryPendingOperationStore, PendingOperationStore

__all__ = [
    "InMemoryPendingOperationStore",
    "PendingOperationStore",
]
