"""Data models for the dependency graph and its condensation."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


class WarningKind(enum.Enum):
    RESOLUTION = "resolution"
    STRUCTURAL_ASSUMPTION = "structural_assumption"


@dataclass(frozen=True)
class GraphWarning:
    kind: WarningKind
    unit: str
    specifier: str
    message: str


@dataclass(frozen=True)
class DependencyGraph:
    dependencies: Mapping[str, frozenset[str]]  # unit -> {units it imports}
    warnings: tuple[GraphWarning, ...] = ()

    @property
    def units(self) -> list[str]:
        return sorted(self.dependencies)

    def edge_count(self) -> int:
        return sum(len(deps) for deps in self.dependencies.values())


@dataclass(frozen=True)
class Cluster:
    """A strongly connected component; a plain file is a cluster of one."""
    id: int
    members: frozenset[str]

    @property
    def files(self) -> list[str]:
        return sorted(self.members)

    @property
    def is_cycle(self) -> bool:
        return len(self.members) > 1


@dataclass(frozen=True)
class CondensedGraph:
    clusters: tuple[Cluster, ...]  # indexed by cluster id
    unit_to_cluster: Mapping[str, int]
    dependencies: Mapping[int, frozenset[int]]  # cluster -> {clusters it imports}
    dependents: Mapping[int, frozenset[int]]  # cluster -> {clusters importing it}
    graph: DependencyGraph | None = None

    def cluster_of(self, unit: str) -> Cluster:
        return self.clusters[self.unit_to_cluster[unit]]

    @property
    def units(self) -> list[str]:
        return sorted(self.unit_to_cluster)


@dataclass(frozen=True)
class DepthMetrics:
    dependency_depth: int  # longest chain down to a cluster with no imports
    dependent_depth: int  # longest chain up to a cluster nothing imports


def freeze(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass
class CycleReport:
    cycles: list[list[str]] = field(default_factory=list)
    singles: list[str] = field(default_factory=list)
