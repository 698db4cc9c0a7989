"""Exceptions raised by the migration engine."""

from __future__ import annotations


class StrictMigrateError(Exception):
    """Base class for strict-migrate errors."""


class ConfigurationError(StrictMigrateError):
    """A configuration source (tsconfig file or environment variable) is unusable."""

    def __init__(self, path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class GraphInvariantError(StrictMigrateError):
    """The condensed dependency graph is not acyclic."""


class OracleError(StrictMigrateError):
    """The validation oracle could not be started."""
