"""Frontier engine: which clusters can be tried next."""

from __future__ import annotations

from typing import AbstractSet

from strict_migrate.analysis.graph_models import Cluster, CondensedGraph


def is_fully_accepted(cluster: Cluster, accepted: AbstractSet[str]) -> bool:
    return cluster.members <= accepted


def eligible_clusters(condensed: CondensedGraph, accepted: AbstractSet[str]) -> list[Cluster]:
    """Return the clusters not yet accepted whose direct dependencies all are.

    The result depends only on ``condensed`` and ``accepted``. It is ordered
    by cluster id, i.e. by the sorted member paths, which is the order the
    driver tries them in.
    """
    fully_accepted = {
        c.id for c in condensed.clusters if is_fully_accepted(c, accepted)
    }
    return [
        cluster
        for cluster in condensed.clusters
        if cluster.id not in fully_accepted
        and condensed.dependencies[cluster.id] <= fully_accepted
    ]


def eligible_units(condensed: CondensedGraph, accepted: AbstractSet[str]) -> set[str]:
    units: set[str] = set()
    for cluster in eligible_clusters(condensed, accepted):
        units |= cluster.members
    return units
