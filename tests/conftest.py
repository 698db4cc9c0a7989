"""Shared helpers: in-memory graphs, stores and oracles, and the sample TypeScript project."""

import shlex
import shutil
import sys
from pathlib import Path

import pytest

from strict_migrate.analysis.clusters import collapse
from strict_migrate.analysis.dependency_graph import DependencyGraphBuilder
from strict_migrate.exceptions import OracleError
from strict_migrate.models import IncludeMode, MigrationConfig, ValidationVerdict
from strict_migrate.oracle.base import BaseOracle
from strict_migrate.resolver.base import BaseResolver

FIXTURES = Path(__file__).parent / "fixtures"
TS_PROJECT = FIXTURES / "ts_project"
FAKE_TSC = FIXTURES / "fake_tsc.py"


# ── Helpers ───────────────────────────────────────────────────

class DictResolver(BaseResolver):
    """Resolver over a hand-written {unit: [imports]} mapping."""

    extensions = (".ts",)

    def __init__(self, edges):
        super().__init__(Path("/"))
        self.edges = edges
        self.calls = []

    def _resolve(self, unit):
        self.calls.append(str(unit))
        return list(self.edges.get(str(unit), []))


def make_graph(edges, units=None):
    resolver = DictResolver(edges)
    return DependencyGraphBuilder(resolver).build(units if units is not None else edges.keys())


def make_condensed(edges):
    return collapse(make_graph(edges))


class InMemoryStore:
    def __init__(self, accepted=()):
        self.accepted = set(accepted)
        self.writes = []

    def read_accepted_set(self):
        return set(self.accepted)

    def add_unit(self, unit):
        if unit in self.accepted:
            return False
        self.accepted.add(unit)
        self.writes.append(unit)
        return True


class ScriptedOracle(BaseOracle):
    """Oracle whose verdicts come from a {unit: verdict} table.

    A table value may be an int, a ValidationVerdict, or a list of those
    consumed one per submission. Units missing from the table pass.
    Starts whose 1-based number is in ``failing_starts`` raise OracleError.
    """

    def __init__(self, verdicts=None, failing_starts=()):
        self.verdicts = dict(verdicts or {})
        self.failing_starts = set(failing_starts)
        self.submissions = []
        self.starts = 0
        self.stops = 0
        self.running = False

    def start(self):
        self.starts += 1
        if self.starts in self.failing_starts:
            raise OracleError(f"start {self.starts} failed")
        self.running = True

    def stop(self):
        if self.running:
            self.stops += 1
        self.running = False

    def try_checking(self, units):
        assert self.running, "submission outside start/stop"
        units = sorted(units)
        self.submissions.append(units)
        for unit in units:
            if unit not in self.verdicts:
                continue
            value = self.verdicts[unit]
            if isinstance(value, list):
                if not value:
                    continue
                value = value.pop(0)
            if isinstance(value, ValidationVerdict):
                return value
            return ValidationVerdict.errors(value)
        return ValidationVerdict.errors(0)


def fake_tsc_config(**overrides):
    options = {
        "tsc_command": [sys.executable, str(FAKE_TSC)],
        "verdict_timeout": 10.0,
        "startup_timeout": 10.0,
        "mode": IncludeMode.ADD_TO_FILES,
    }
    options.update(overrides)
    return MigrationConfig(**options)


def fake_tsc_cli_arg():
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(FAKE_TSC))}"


@pytest.fixture
def ts_project(tmp_path):
    """A writable copy of the sample project; returns its tsconfig path."""
    root = tmp_path / "project"
    shutil.copytree(TS_PROJECT, root)
    return root / "tsconfig.json"


def unit(tsconfig, relative):
    return str((tsconfig.parent / relative).resolve())
