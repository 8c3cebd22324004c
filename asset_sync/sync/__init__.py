"""
Sync operations module.

Handles reconciliation, recursive tree sync, manifest sync, and the
top-level orchestrator.
"""

from .result import SyncResult
from .reconciler import Action, Decision, CacheReconciler, decide, plan_deletions
from .tree_walker import TreeWalker
from .manifest_sync import ManifestSync
from .orchestrator import AssetSync, SyncStream

__all__ = [
    # Results
    "SyncResult",
    # Reconciliation
    "Action",
    "Decision",
    "CacheReconciler",
    "decide",
    "plan_deletions",
    # Walkers
    "TreeWalker",
    "ManifestSync",
    # Orchestration
    "AssetSync",
    "SyncStream",
]
