"""Pipeline orchestrator: resolve -> graph -> collapse -> (migrate | report)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from strict_migrate.analysis.clusters import collapse
from strict_migrate.analysis.dependency_graph import DependencyGraphBuilder
from strict_migrate.analysis.graph_models import CondensedGraph, DependencyGraph
from strict_migrate.analysis.snapshot import build_snapshot, summarize
from strict_migrate.driver import MigrationDriver, MigrationResult, ProgressCallback, count_eligible_errors
from strict_migrate.models import MigrationConfig, ValidationVerdict
from strict_migrate.oracle.error_counter import ErrorCounter
from strict_migrate.resolver import create_resolver
from strict_migrate.tsconfig import TsConfigStore

logger = logging.getLogger(__name__)


@dataclass
class Project:
    """Everything derived from one tsconfig for the duration of a run."""
    tsconfig_path: Path
    store: TsConfigStore
    graph: DependencyGraph
    condensed: CondensedGraph

    @property
    def src_root(self) -> Path:
        return self.store.src_root


def load_project(tsconfig_path: Path, config: MigrationConfig | None = None) -> Project:
    """Build the dependency graph and its clusters for the tree beside ``tsconfig_path``."""
    config = config or MigrationConfig()
    store = TsConfigStore(tsconfig_path, ignored_suffixes=config.ignored_suffixes)
    # Fail on an unreadable tsconfig before walking the tree
    store.load()
    resolver = create_resolver(store.src_root, config)
    graph = DependencyGraphBuilder(resolver).build()
    return Project(
        tsconfig_path=store.path,
        store=store,
        graph=graph,
        condensed=collapse(graph),
    )


def run_auto_add(
    tsconfig_path: Path,
    config: MigrationConfig | None = None,
    progress: ProgressCallback | None = None,
) -> tuple[Project, MigrationResult]:
    config = config or MigrationConfig()
    project = load_project(tsconfig_path, config)
    driver = MigrationDriver(
        project.condensed,
        project.store,
        oracle_factory=lambda: ErrorCounter(project.tsconfig_path, config),
        progress=progress,
    )
    return project, driver.run()


def run_snapshot(
    tsconfig_path: Path,
    config: MigrationConfig | None = None,
    count_errors: bool = False,
    progress: Callable[[object, ValidationVerdict], None] | None = None,
    project: Project | None = None,
) -> tuple[list[dict], dict]:
    """Build the diagnostic nodes and the progress summary."""
    config = config or MigrationConfig()
    project = project or load_project(tsconfig_path, config)
    accepted = project.store.read_accepted_set()

    error_counts = None
    if count_errors:
        with ErrorCounter(project.tsconfig_path, config) as oracle:
            error_counts = count_eligible_errors(project.condensed, accepted, oracle, progress)

    nodes = build_snapshot(project.condensed, accepted, project.src_root, error_counts)
    return nodes, summarize(project.condensed, accepted)
