"""Error counter backed by ``tsc --watch`` on a private copy of the tsconfig."""

from __future__ import annotations

import json
import logging
import os
import queue
import re
import subprocess
import tempfile
import threading
import time
from pathlib import Path
from typing import IO, Iterable

from strict_migrate.exceptions import ConfigurationError, OracleError
from strict_migrate.models import IncludeMode, MigrationConfig, ValidationVerdict
from strict_migrate.oracle.base import BaseOracle
from strict_migrate.tsconfig import config_entry, write_json_atomic

logger = logging.getLogger(__name__)

BUILD_COMPLETE_RE = re.compile(r"Found (\d+) errors?\. Watching for file changes\.", re.IGNORECASE)

_STOP_GRACE_SECONDS = 5.0


class ErrorCounter(BaseOracle):
    """Counts strictNullChecks errors for one candidate cluster at a time.

    Args:
        tsconfig_path: The persisted tsconfig. It is copied, never modified.
        config: Supplies the tsc command, the timeouts and the include mode.
    """

    def __init__(self, tsconfig_path: Path, config: MigrationConfig | None = None):
        self.tsconfig_path = Path(tsconfig_path).resolve()
        self.src_root = self.tsconfig_path.parent
        self.config = config or MigrationConfig()
        self.baseline_error_count: int | None = None
        self._baseline: dict = {}
        self._copy_path: Path | None = None
        self._process: subprocess.Popen | None = None
        self._reader: threading.Thread | None = None
        self._lines: queue.Queue[str | None] = queue.Queue()
        self._exited = False

    @property
    def copy_path(self) -> Path | None:
        return self._copy_path

    @property
    def running(self) -> bool:
        return self._process is not None

    # ── Lifecycle ────────────────────────────────────────────

    def start(self) -> None:
        if self._process is not None:
            return
        try:
            self._baseline = json.loads(self.tsconfig_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(self.tsconfig_path, f"cannot read: {e}") from e

        fd, copy = tempfile.mkstemp(
            dir=self.src_root, prefix=f"{self.tsconfig_path.stem}.", suffix=".copy.json",
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(self._baseline, indent=2))
        self._copy_path = Path(copy)

        command = [*self.config.tsc_command, "-p", str(self._copy_path), "--watch", "--noEmit"]
        logger.info("Starting oracle: %s", " ".join(command))
        self._lines = queue.Queue()
        self._exited = False
        try:
            self._process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            self._remove_copy()
            raise OracleError(f"Cannot start {command[0]}: {e}") from e

        self._reader = threading.Thread(
            target=_pump, args=(self._process.stdout, self._lines),
            name="tsc-output", daemon=True,
        )
        self._reader.start()

        verdict = self._await_verdict(self.config.startup_timeout)
        if verdict.oracle_failed:
            self.stop()
            raise OracleError(f"Oracle did not finish its initial build ({verdict.failure})")
        self.baseline_error_count = verdict.error_count
        logger.info("Oracle ready, baseline has %d error(s)", verdict.error_count)

    def stop(self) -> None:
        process, self._process = self._process, None
        try:
            if process is not None:
                if process.poll() is None:
                    process.terminate()
                    try:
                        process.wait(timeout=_STOP_GRACE_SECONDS)
                    except subprocess.TimeoutExpired:
                        logger.warning("Oracle ignored terminate, killing pid %d", process.pid)
                        process.kill()
                        process.wait()
            reader, self._reader = self._reader, None
            if reader is not None:
                reader.join(timeout=_STOP_GRACE_SECONDS)
            # Closing while the reader is still blocked in readline would block too
            if process is not None and process.stdout is not None:
                if reader is None or not reader.is_alive():
                    process.stdout.close()
        finally:
            self._remove_copy()

    # ── Submission ───────────────────────────────────────────

    def try_checking(self, units: Iterable[str]) -> ValidationVerdict:
        if self._process is None:
            raise OracleError("Oracle is not running")
        self._discard_stale_output()
        if self._exited or self._process.poll() is not None:
            return ValidationVerdict.failed("exited")
        self._write_tentative(sorted(units))
        return self._await_verdict(self.config.verdict_timeout)

    def _write_tentative(self, units: list[str]) -> None:
        entries = [config_entry(self.src_root, unit) for unit in units]
        config = dict(self._baseline)
        if self.config.mode is IncludeMode.ADD_TO_FILES:
            files = list(self._baseline.get("files") or [])
            files.extend(e for e in entries if e not in files)
            config["files"] = files
        else:
            config["exclude"] = [
                e for e in self._baseline.get("exclude") or [] if e not in entries
            ]
        try:
            write_json_atomic(self._copy_path, config)
        except OSError as e:
            raise ConfigurationError(self._copy_path, f"cannot write: {e}") from e

    def _await_verdict(self, timeout: float) -> ValidationVerdict:
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return ValidationVerdict.failed("timeout")
            try:
                line = self._lines.get(timeout=remaining)
            except queue.Empty:
                return ValidationVerdict.failed("timeout")
            if line is None:
                self._exited = True
                return ValidationVerdict.failed("exited")
            m = BUILD_COMPLETE_RE.search(line)
            if m:
                return ValidationVerdict.errors(int(m.group(1)))
            logger.debug("tsc: %s", line.rstrip())

    def _discard_stale_output(self) -> None:
        while True:
            try:
                line = self._lines.get_nowait()
            except queue.Empty:
                return
            if line is None:
                self._exited = True

    def _remove_copy(self) -> None:
        if self._copy_path is not None:
            self._copy_path.unlink(missing_ok=True)
            self._copy_path = None


def _pump(stream: IO[str], lines: queue.Queue) -> None:
    """Forward process output line by line; ``None`` marks end of output."""
    try:
        for line in iter(stream.readline, ""):
            lines.put(line)
    finally:
        lines.put(None)
