"""Reconciliation of duplicate persisted entities."""

from __future__ import annotations

from .engine import MergeEngine, MergeError, MergeReport
from .plan import ClusterSummary, MergePreview, collapse_cluster, order_members

__all__ = [
    "ClusterSummary",
    "MergeEngine",
    "MergeError",
    "MergePreview",
    "MergeReport",
    "collapse_cluster",
    "order_members",
]
