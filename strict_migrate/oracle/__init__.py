"""Validation oracles."""

from strict_migrate.oracle.base import BaseOracle
from strict_migrate.oracle.error_counter import BUILD_COMPLETE_RE, ErrorCounter

__all__ = ["BaseOracle", "BUILD_COMPLETE_RE", "ErrorCounter"]
