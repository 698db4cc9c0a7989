"""Migration driver: try eligible clusters, commit the clean ones, repeat until nothing changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, Callable

from strict_migrate.analysis.frontier import eligible_clusters
from strict_migrate.analysis.graph_models import Cluster, CondensedGraph
from strict_migrate.exceptions import OracleError
from strict_migrate.models import DriverState, ValidationVerdict
from strict_migrate.oracle.base import BaseOracle
from strict_migrate.tsconfig import TsConfigStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptReport:
    pass_number: int
    index: int  # 1-based position in the pass
    total: int
    cluster: Cluster
    verdict: ValidationVerdict


@dataclass
class PassReport:
    number: int
    attempts: list[AttemptReport] = field(default_factory=list)
    interrupted: bool = False  # ended early because the oracle could not restart

    @property
    def accepted_clusters(self) -> list[Cluster]:
        return [a.cluster for a in self.attempts if a.verdict.accepted]


@dataclass
class MigrationResult:
    state: DriverState
    accepted: frozenset[str]
    initially_accepted: frozenset[str]
    total_units: int
    passes: list[PassReport] = field(default_factory=list)

    @property
    def newly_accepted(self) -> list[str]:
        return sorted(self.accepted - self.initially_accepted)

    def accepted_in_scope(self, condensed: CondensedGraph) -> int:
        return len(self.accepted & set(condensed.unit_to_cluster))


ProgressCallback = Callable[[AttemptReport], None]
OracleFactory = Callable[[], BaseOracle]


class MigrationDriver:
    """Runs the accept/reject loop to a fixpoint.

    Each pass takes a snapshot of the eligibility frontier, acquires a fresh
    oracle and tries every cluster in the snapshot one at a time. A clean
    cluster is written to the tsconfig before the next one is tried. The run
    converges on the first pass that accepts nothing.

    Oracle failures after the first start are recovered, not raised: a pass
    whose oracle cannot restart ends early and earns one retry pass, and a
    later pass whose oracle cannot start reports its clusters as failed.
    """

    def __init__(
        self,
        condensed: CondensedGraph,
        store: TsConfigStore,
        oracle_factory: OracleFactory,
        progress: ProgressCallback | None = None,
    ):
        self.condensed = condensed
        self.store = store
        self.oracle_factory = oracle_factory
        self.progress = progress
        self.state = DriverState.RUNNING

    def run(self) -> MigrationResult:
        accepted = set(self.store.read_accepted_set())
        initially_accepted = frozenset(accepted)
        passes: list[PassReport] = []
        self.state = DriverState.RUNNING
        retried = False

        while self.state is DriverState.RUNNING:
            frontier = eligible_clusters(self.condensed, accepted)
            if not frontier:
                self.state = DriverState.CONVERGED
                break
            report = self._run_pass(len(passes) + 1, frontier, accepted)
            passes.append(report)
            if report.accepted_clusters:
                retried = False
            elif report.interrupted and not retried:
                # One more pass with a fresh oracle for the clusters that were skipped
                retried = True
            else:
                self.state = DriverState.CONVERGED

        result = MigrationResult(
            state=self.state,
            accepted=frozenset(accepted),
            initially_accepted=initially_accepted,
            total_units=len(self.condensed.unit_to_cluster),
            passes=passes,
        )
        logger.info(
            "Converged after %d pass(es): %d/%d files strict-checked (%d new)",
            len(passes), result.accepted_in_scope(self.condensed),
            result.total_units, len(result.newly_accepted),
        )
        return result

    def _run_pass(self, number: int, frontier: list[Cluster], accepted: set[str]) -> PassReport:
        report = PassReport(number=number)
        logger.info("Pass %d: %d eligible cluster(s)", number, len(frontier))

        oracle = self.oracle_factory()
        try:
            oracle.start()
        except OracleError as e:
            # Startup failure on the first pass is fatal
            if number == 1:
                raise
            logger.warning("Oracle could not start for pass %d: %s", number, e)
            self._skip(report, frontier, 0, "start")
            return report

        try:
            for index, cluster in enumerate(frontier, start=1):
                verdict = oracle.try_checking(cluster.members)
                if verdict.accepted:
                    self._commit(cluster, accepted)
                    logger.info("Accepted %s", ", ".join(cluster.files))
                elif verdict.oracle_failed:
                    logger.warning(
                        "Oracle failure (%s) while checking %s",
                        verdict.failure, ", ".join(cluster.files),
                    )
                else:
                    logger.info("Rejected %s: %s", ", ".join(cluster.files), verdict.describe())
                self._record(report, index, len(frontier), cluster, verdict)

                if verdict.oracle_failed and index < len(frontier):
                    try:
                        oracle.restart()
                    except OracleError as e:
                        logger.warning("Oracle restart failed, ending pass %d: %s", number, e)
                        report.interrupted = True
                        self._skip(report, frontier, index, "restart")
                        break
        finally:
            oracle.stop()

        return report

    def _record(
        self,
        report: PassReport,
        index: int,
        total: int,
        cluster: Cluster,
        verdict: ValidationVerdict,
    ) -> None:
        attempt = AttemptReport(
            pass_number=report.number,
            index=index,
            total=total,
            cluster=cluster,
            verdict=verdict,
        )
        report.attempts.append(attempt)
        if self.progress:
            self.progress(attempt)

    def _skip(self, report: PassReport, frontier: list[Cluster], done: int, reason: str) -> None:
        """Report every cluster after the first ``done`` as an oracle failure."""
        verdict = ValidationVerdict.failed(reason)
        for index, cluster in enumerate(frontier[done:], start=done + 1):
            self._record(report, index, len(frontier), cluster, verdict)

    def _commit(self, cluster: Cluster, accepted: set[str]) -> None:
        # A unit joins ``accepted`` only after add_unit returned
        for unit in cluster.files:
            if unit not in accepted:
                self.store.add_unit(unit)
                accepted.add(unit)


def count_eligible_errors(
    condensed: CondensedGraph,
    accepted: AbstractSet[str],
    oracle: BaseOracle,
    progress: Callable[[Cluster, ValidationVerdict], None] | None = None,
) -> dict[int, int | None]:
    """Error count for every eligible cluster, ``None`` where the oracle failed."""
    counts: dict[int, int | None] = {}
    frontier = eligible_clusters(condensed, accepted)
    for index, cluster in enumerate(frontier):
        verdict = oracle.try_checking(cluster.members)
        counts[cluster.id] = verdict.error_count
        if progress:
            progress(cluster, verdict)
        if verdict.oracle_failed and index < len(frontier) - 1:
            try:
                oracle.restart()
            except OracleError as e:
                logger.warning("Oracle restart failed, %d cluster(s) left uncounted: %s",
                               len(frontier) - index - 1, e)
                for rest in frontier[index + 1:]:
                    counts[rest.id] = None
                break
    return counts
