"""Abstract base resolver."""

from __future__ import annotations

import abc
import fnmatch
import logging
from pathlib import Path

from strict_migrate.analysis.graph_models import GraphWarning, WarningKind

logger = logging.getLogger(__name__)


class BaseResolver(abc.ABC):
    """Maps a compilation unit to the units it directly imports."""

    extensions: tuple[str, ...]

    def __init__(
        self,
        src_root: Path,
        skip_dirs: list[str] | None = None,
        ignored_suffixes: tuple[str, ...] = (),
    ):
        self.src_root = Path(src_root).resolve()
        self.skip_dirs = skip_dirs or ["node_modules", ".git"]
        self.ignored_suffixes = ignored_suffixes
        self.warnings: list[GraphWarning] = []
        self._cache: dict[str, list[str]] = {}

    @abc.abstractmethod
    def _resolve(self, unit: Path) -> list[str]:
        """Resolve the imports of a single file, uncached."""

    def resolve_dependencies(self, unit: str) -> list[str]:
        """Return the identities ``unit`` imports, memoized for this resolver."""
        if unit not in self._cache:
            self._cache[unit] = self._resolve(Path(unit))
        return self._cache[unit]

    def list_units(self) -> list[str]:
        """Recursively list the in-scope source files under ``src_root``."""
        units: list[str] = []
        for path in sorted(self.src_root.rglob("*")):
            if path.is_dir() or self._should_skip(path):
                continue
            if self.is_source(path):
                units.append(str(path.resolve()))
        return units

    def is_source(self, path: Path) -> bool:
        name = path.name
        return name.endswith(self.extensions) and not name.endswith(self.ignored_suffixes)

    def _should_skip(self, path: Path) -> bool:
        for part in path.relative_to(self.src_root).parts[:-1]:
            for pattern in self.skip_dirs:
                if fnmatch.fnmatch(part, pattern):
                    return True
        return False

    def _relative(self, path: Path | str) -> str:
        try:
            return Path(path).relative_to(self.src_root).as_posix()
        except ValueError:
            return str(path)

    def _warn(self, kind: WarningKind, unit: Path, specifier: str, message: str) -> None:
        logger.warning("%s (in %s)", message, self._relative(unit))
        self.warnings.append(GraphWarning(
            kind=kind,
            unit=str(unit),
            specifier=specifier,
            message=message,
        ))
