"""Cluster collapser: contracts import cycles into single schedulable nodes."""

from __future__ import annotations

import logging

import networkx as nx

from strict_migrate.analysis.graph_models import (
    Cluster,
    CondensedGraph,
    CycleReport,
    DependencyGraph,
    freeze,
)
from strict_migrate.exceptions import GraphInvariantError

logger = logging.getLogger(__name__)


def to_digraph(graph: DependencyGraph) -> nx.DiGraph:
    g = nx.DiGraph()
    g.add_nodes_from(graph.dependencies)
    for unit, deps in graph.dependencies.items():
        g.add_edges_from((unit, dep) for dep in deps)
    return g


def collapse(graph: DependencyGraph) -> CondensedGraph:
    """Compute strongly connected components and the condensed DAG over them.

    Cluster ids follow the ascending order of each cluster's sorted member
    list, so the same repository always yields the same ids.
    """
    g = to_digraph(graph)
    components = sorted(
        (frozenset(c) for c in nx.strongly_connected_components(g)),
        key=lambda c: sorted(c),
    )
    condensed = nx.condensation(g, scc=components)
    if not nx.is_directed_acyclic_graph(condensed):
        raise GraphInvariantError("Condensed dependency graph contains a cycle")

    clusters = tuple(Cluster(id=i, members=members) for i, members in enumerate(components))
    dependencies = {
        i: frozenset(condensed.successors(i)) for i in range(len(clusters))
    }
    dependents = {
        i: frozenset(condensed.predecessors(i)) for i in range(len(clusters))
    }

    cycle_count = sum(1 for c in clusters if c.is_cycle)
    logger.info("Collapsed %d units into %d clusters (%d cycles)",
                len(graph.dependencies), len(clusters), cycle_count)

    return CondensedGraph(
        clusters=clusters,
        unit_to_cluster=freeze(condensed.graph["mapping"]),
        dependencies=freeze(dependencies),
        dependents=freeze(dependents),
        graph=graph,
    )


def find_cycles(condensed: CondensedGraph) -> CycleReport:
    """Split clusters into import cycles and files that are in no cycle."""
    report = CycleReport()
    for cluster in condensed.clusters:
        if cluster.is_cycle:
            report.cycles.append(cluster.files)
        else:
            report.singles.extend(cluster.members)
    report.singles.sort()
    return report
