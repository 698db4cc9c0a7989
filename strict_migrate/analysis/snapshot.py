"""Diagnostic snapshot: per-cluster data for visualizing migration progress."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import AbstractSet, Mapping

from strict_migrate.analysis.depth import compute_depths
from strict_migrate.analysis.frontier import eligible_clusters, is_fully_accepted
from strict_migrate.analysis.graph_models import CondensedGraph


def build_snapshot(
    condensed: CondensedGraph,
    accepted: AbstractSet[str],
    src_root: Path | str,
    error_counts: Mapping[int, int | None] | None = None,
) -> list[dict]:
    """Build one node dict per cluster.

    Returns: [{id, files, checked, eligible, errorCount, dependents,
    dependencies, dependentDepth, dependencyDepth}, ...]
    """
    error_counts = error_counts or {}
    eligible_ids = {c.id for c in eligible_clusters(condensed, accepted)}
    depths = compute_depths(condensed)

    nodes: list[dict] = []
    for cluster in condensed.clusters:
        metrics = depths[cluster.id]
        nodes.append({
            "id": cluster.id,
            "files": sorted(
                Path(os.path.relpath(f, src_root)).as_posix() for f in cluster.members
            ),
            "checked": is_fully_accepted(cluster, accepted),
            "eligible": cluster.id in eligible_ids,
            "errorCount": error_counts.get(cluster.id),
            "dependents": sorted(condensed.dependents[cluster.id]),
            "dependencies": sorted(condensed.dependencies[cluster.id]),
            "dependentDepth": metrics.dependent_depth,
            "dependencyDepth": metrics.dependency_depth,
        })
    return nodes


def summarize(condensed: CondensedGraph, accepted: AbstractSet[str]) -> dict:
    units = set(condensed.unit_to_cluster)
    eligible = eligible_clusters(condensed, accepted)
    return {
        "checked": len(units & set(accepted)),
        "total": len(units),
        "eligible_files": sum(len(c.members) for c in eligible),
        "eligible_clusters": len(eligible),
        "clusters": len(condensed.clusters),
        "cycles": sum(1 for c in condensed.clusters if c.is_cycle),
    }


def write_snapshot(nodes: list[dict], path: Path) -> Path:
    """Write nodes as JSON (``.json``) or as a ``window.nodes = ...`` script."""
    path = Path(path)
    if path.suffix == ".json":
        path.write_text(json.dumps({"nodes": nodes}, indent=2))
    else:
        path.write_text(f"window.nodes = {json.dumps(nodes)}")
    return path
