"""Graph analysis: building, collapsing, frontier, depth and snapshots."""

from strict_migrate.analysis.clusters import collapse, find_cycles
from strict_migrate.analysis.dependency_graph import DependencyGraphBuilder
from strict_migrate.analysis.depth import compute_depths
from strict_migrate.analysis.frontier import eligible_clusters, eligible_units, is_fully_accepted
from strict_migrate.analysis.graph_models import (
    Cluster,
    CondensedGraph,
    DependencyGraph,
    DepthMetrics,
    GraphWarning,
    WarningKind,
)
from strict_migrate.analysis.snapshot import build_snapshot, summarize, write_snapshot

__all__ = [
    "Cluster",
    "CondensedGraph",
    "DependencyGraph",
    "DependencyGraphBuilder",
    "DepthMetrics",
    "GraphWarning",
    "WarningKind",
    "build_snapshot",
    "collapse",
    "compute_depths",
    "eligible_clusters",
    "eligible_units",
    "find_cycles",
    "is_fully_accepted",
    "summarize",
    "write_snapshot",
]
