"""Depth analyzer: longest import chains below and above each cluster."""

from __future__ import annotations

from typing import Mapping

from strict_migrate.analysis.graph_models import CondensedGraph, DepthMetrics
from strict_migrate.exceptions import GraphInvariantError


def _layer(ids: list[int], neighbors: Mapping[int, frozenset[int]]) -> dict[int, int]:
    """Peel off nodes whose neighbors all have a depth; each round is one layer."""
    depth: dict[int, int] = {}
    remaining = list(ids)
    current = 0
    while remaining:
        layer = [n for n in remaining if all(m in depth for m in neighbors[n])]
        if not layer:
            raise GraphInvariantError(
                f"Cannot layer {len(remaining)} clusters: condensed graph has a cycle"
            )
        # Assign after selecting so nodes in one layer never depend on each other
        for n in layer:
            depth[n] = current
        assigned = set(layer)
        remaining = [n for n in remaining if n not in assigned]
        current += 1
    return depth


def compute_depths(condensed: CondensedGraph) -> dict[int, DepthMetrics]:
    ids = [c.id for c in condensed.clusters]
    dependency_depth = _layer(ids, condensed.dependencies)
    dependent_depth = _layer(ids, condensed.dependents)
    return {
        i: DepthMetrics(
            dependency_depth=dependency_depth[i],
            dependent_depth=dependent_depth[i],
        )
        for i in ids
    }
