"""Dependency graph builder: resolves each unit's imports into in-scope edges."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from strict_migrate.analysis.graph_models import (
    DependencyGraph,
    GraphWarning,
    WarningKind,
    freeze,
)

if TYPE_CHECKING:
    from strict_migrate.resolver.base import BaseResolver

logger = logging.getLogger(__name__)


class DependencyGraphBuilder:
    """Build the unit-level import graph over a fixed set of units."""

    def __init__(self, resolver: BaseResolver):
        self.resolver = resolver

    def build(self, units: Iterable[str] | None = None) -> DependencyGraph:
        if units is None:
            units = self.resolver.list_units()
        scope = set(units)
        warnings: list[GraphWarning] = []
        dependencies: dict[str, frozenset[str]] = {}

        for unit in sorted(scope):
            deps: list[str] = []
            seen: set[str] = set()
            for dep in self.resolver.resolve_dependencies(unit):
                if dep == unit or dep in seen:
                    continue
                seen.add(dep)
                if dep not in scope:
                    # Declaration files outside the source tree are already typed
                    if dep.endswith(".d.ts"):
                        logger.debug("Skipping out-of-scope declaration %s", dep)
                        continue
                    message = f"Import outside the source root: {dep}"
                    logger.warning("%s (in %s)", message, unit)
                    warnings.append(GraphWarning(
                        kind=WarningKind.RESOLUTION,
                        unit=unit,
                        specifier=dep,
                        message=message,
                    ))
                    continue
                deps.append(dep)
            dependencies[unit] = frozenset(deps)

        warnings = list(self.resolver.warnings) + warnings
        graph = DependencyGraph(dependencies=freeze(dependencies), warnings=tuple(warnings))
        logger.info(
            "Built dependency graph: %d units, %d edges, %d warnings",
            len(dependencies), graph.edge_count(), len(warnings),
        )
        return graph
