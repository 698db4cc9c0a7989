"""Data models for the strict-migrate engine."""

from __future__ import annotations

import enum
import os
import shlex
from dataclasses import dataclass, field

from strict_migrate.exceptions import ConfigurationError


class IncludeMode(enum.Enum):
    """How a candidate file is tentatively switched on in the tsconfig copy."""
    ADD_TO_FILES = "add-to-files"
    REMOVE_FROM_EXCLUDE = "remove-from-exclude"


class DriverState(enum.Enum):
    RUNNING = "running"
    CONVERGED = "converged"


@dataclass(frozen=True)
class ValidationVerdict:
    """Result of trying one cluster against the oracle."""
    error_count: int | None = None
    failure: str | None = None  # "timeout" | "exited"

    @classmethod
    def errors(cls, count: int) -> ValidationVerdict:
        return cls(error_count=count)

    @classmethod
    def failed(cls, reason: str) -> ValidationVerdict:
        return cls(failure=reason)

    @property
    def accepted(self) -> bool:
        return self.failure is None and self.error_count == 0

    @property
    def oracle_failed(self) -> bool:
        return self.failure is not None

    def describe(self) -> str:
        if self.failure:
            return f"oracle failure ({self.failure})"
        return f"{self.error_count} error(s)"


@dataclass
class MigrationConfig:
    """Configuration for a migration run.

    Unset fields fall back to ``STRICT_MIGRATE_TSC`` and
    ``STRICT_MIGRATE_TIMEOUT`` from the environment.
    """
    tsc_command: list[str] = field(default_factory=list)
    verdict_timeout: float | None = None
    startup_timeout: float = 900.0
    mode: IncludeMode = IncludeMode.ADD_TO_FILES
    skip_dirs: list[str] = field(default_factory=lambda: [
        "node_modules", ".git", "dist", "build", "out", "coverage",
    ])
    ignored_suffixes: tuple[str, ...] = (".stories.tsx",)

    def __post_init__(self):
        if not self.tsc_command:
            raw = os.getenv("STRICT_MIGRATE_TSC", "node_modules/typescript/bin/tsc")
            self.tsc_command = shlex.split(raw)
        if self.verdict_timeout is None:
            raw = os.getenv("STRICT_MIGRATE_TIMEOUT", "600")
            try:
                self.verdict_timeout = float(raw)
            except ValueError:
                raise ConfigurationError(
                    "STRICT_MIGRATE_TIMEOUT", f"expected a number of seconds, got {raw!r}",
                ) from None
            if self.verdict_timeout <= 0:
                raise ConfigurationError(
                    "STRICT_MIGRATE_TIMEOUT", f"must be positive, got {raw!r}",
                )
