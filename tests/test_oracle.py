"""Tests for the tsc --watch error counter, driven by a fake compiler."""

import json
import os
import sys
from pathlib import Path

import pytest

from strict_migrate.exceptions import ConfigurationError, OracleError
from strict_migrate.models import IncludeMode
from strict_migrate.oracle import BUILD_COMPLETE_RE, ErrorCounter

from conftest import FAKE_TSC, fake_tsc_config, unit


def _copies(tsconfig):
    return sorted(tsconfig.parent.glob("*.copy.json"))


# ── Output parsing ────────────────────────────────────────────

class TestBuildCompleteLine:
    def test_plural(self):
        m = BUILD_COMPLETE_RE.search("[12:00:00 PM] Found 12 errors. Watching for file changes.")
        assert m and m.group(1) == "12"

    def test_singular(self):
        m = BUILD_COMPLETE_RE.search("Found 1 error. Watching for file changes.")
        assert m and m.group(1) == "1"

    def test_other_lines(self):
        assert BUILD_COMPLETE_RE.search("Starting compilation in watch mode...") is None
        assert BUILD_COMPLETE_RE.search("src/a.ts(3,5): error TS2532") is None


# ── Submissions ───────────────────────────────────────────────

class TestErrorCounter:
    def test_baseline_and_submissions(self, ts_project):
        with ErrorCounter(ts_project, fake_tsc_config()) as oracle:
            assert oracle.baseline_error_count == 0
            assert oracle.try_checking([unit(ts_project, "src/app/a.ts")]).error_count == 1
            # Each submission is relative to the baseline, not cumulative
            verdict = oracle.try_checking([unit(ts_project, "src/core/b.ts")])
            assert verdict.accepted

    def test_cluster_submission(self, ts_project):
        members = [unit(ts_project, "src/cycle/x.ts"), unit(ts_project, "src/cycle/y.ts")]
        with ErrorCounter(ts_project, fake_tsc_config()) as oracle:
            assert oracle.try_checking(members).accepted
            content = json.loads(oracle.copy_path.read_text())
        assert "./src/cycle/x.ts" in content["files"]
        assert "./src/cycle/y.ts" in content["files"]
        assert "./src/core/c.ts" in content["files"]

    def test_remove_from_exclude(self, ts_project):
        ts_project.write_text(json.dumps({
            "include": ["./src/**/*.ts"],
            "exclude": ["./src/app/a.ts"],
        }))
        config = fake_tsc_config(mode=IncludeMode.REMOVE_FROM_EXCLUDE)
        with ErrorCounter(ts_project, config) as oracle:
            assert oracle.baseline_error_count == 0
            assert oracle.try_checking([unit(ts_project, "src/app/a.ts")]).error_count == 1

    def test_copy_replaced_atomically(self, ts_project, monkeypatch):
        replaced = []
        real_replace = os.replace

        def spy(src, dst):
            replaced.append(Path(dst))
            real_replace(src, dst)

        monkeypatch.setattr("strict_migrate.tsconfig.os.replace", spy)
        a = unit(ts_project, "src/app/a.ts")
        b = unit(ts_project, "src/core/b.ts")
        with ErrorCounter(ts_project, fake_tsc_config()) as oracle:
            counts = [oracle.try_checking([u]).error_count for u in (a, b, a, b, a)]
            assert replaced == [oracle.copy_path] * 5
        assert counts == [1, 0, 1, 0, 1]
        assert sorted(p.name for p in ts_project.parent.iterdir()) == ["src", "tsconfig.json"]

    def test_original_untouched_and_copy_removed(self, ts_project):
        before = ts_project.read_text()
        with ErrorCounter(ts_project, fake_tsc_config()) as oracle:
            assert oracle.copy_path.parent == ts_project.parent
            assert len(_copies(ts_project)) == 1
            oracle.try_checking([unit(ts_project, "src/app/a.ts")])
        assert ts_project.read_text() == before
        assert _copies(ts_project) == []
        assert not oracle.running

    def test_restart(self, ts_project):
        oracle = ErrorCounter(ts_project, fake_tsc_config())
        oracle.start()
        try:
            oracle.restart()
            assert oracle.running
            assert len(_copies(ts_project)) == 1
            assert oracle.try_checking([unit(ts_project, "src/app/a.ts")]).error_count == 1
        finally:
            oracle.stop()
        oracle.stop()
        assert _copies(ts_project) == []

    def test_not_running(self, ts_project):
        with pytest.raises(OracleError):
            ErrorCounter(ts_project, fake_tsc_config()).try_checking([])


# ── Failures ──────────────────────────────────────────────────

class TestErrorCounterFailures:
    def test_exited_process(self, ts_project):
        config = fake_tsc_config(tsc_command=[sys.executable, str(FAKE_TSC), "--exit-after-baseline"])
        with ErrorCounter(ts_project, config) as oracle:
            verdict = oracle.try_checking([unit(ts_project, "src/core/b.ts")])
        assert verdict.oracle_failed
        assert verdict.failure == "exited"

    def test_hanging_process(self, ts_project):
        config = fake_tsc_config(
            tsc_command=[sys.executable, str(FAKE_TSC), "--hang-after-baseline"],
            verdict_timeout=0.5,
        )
        with ErrorCounter(ts_project, config) as oracle:
            verdict = oracle.try_checking([unit(ts_project, "src/core/b.ts")])
        assert verdict.failure == "timeout"
        assert not verdict.accepted

    def test_silent_startup(self, ts_project):
        config = fake_tsc_config(
            tsc_command=[sys.executable, "-c", "import time; time.sleep(30)"],
            startup_timeout=0.5,
        )
        oracle = ErrorCounter(ts_project, config)
        with pytest.raises(OracleError):
            oracle.start()
        assert not oracle.running
        assert _copies(ts_project) == []

    def test_missing_executable(self, ts_project):
        config = fake_tsc_config(tsc_command=[str(ts_project.parent / "no-such-tsc")])
        with pytest.raises(OracleError):
            ErrorCounter(ts_project, config).start()
        assert _copies(ts_project) == []

    def test_invalid_tsconfig(self, ts_project):
        ts_project.write_text("{ not json")
        with pytest.raises(ConfigurationError):
            ErrorCounter(ts_project, fake_tsc_config()).start()
