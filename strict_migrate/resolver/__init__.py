"""Unit resolvers: list compilation units and resolve their imports."""

from __future__ import annotations

from pathlib import Path

from strict_migrate.models import MigrationConfig
from strict_migrate.resolver.base import BaseResolver
from strict_migrate.resolver.typescript_resolver import TypeScriptResolver, extract_specifiers


def create_resolver(src_root: Path, config: MigrationConfig | None = None) -> BaseResolver:
    """Build the resolver for a source root using the run's configuration."""
    config = config or MigrationConfig()
    return TypeScriptResolver(
        src_root,
        skip_dirs=config.skip_dirs,
        ignored_suffixes=config.ignored_suffixes,
    )


__all__ = [
    "BaseResolver",
    "TypeScriptResolver",
    "create_resolver",
    "extract_specifiers",
]
