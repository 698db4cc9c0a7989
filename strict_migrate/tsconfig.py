"""Persisted tsconfig: the authoritative record of strict-checked files."""

from __future__ import annotations

import glob
import json
import logging
import os
import tempfile
from pathlib import Path

from strict_migrate.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_SOURCE_EXTENSIONS = (".ts", ".tsx")


def consider_file(path: str, ignored_suffixes: tuple[str, ...] = (".stories.tsx",)) -> bool:
    return path.endswith(_SOURCE_EXTENSIONS) and not path.endswith(ignored_suffixes)


def config_entry(src_root: Path, unit: str) -> str:
    """Format a unit the way tsconfig ``files``/``exclude`` entries are written."""
    return "./" + Path(os.path.relpath(unit, src_root)).as_posix()


class TsConfigStore:
    """Reads and extends the set of files a tsconfig strict-checks."""

    def __init__(self, tsconfig_path: Path, ignored_suffixes: tuple[str, ...] = (".stories.tsx",)):
        self.path = Path(tsconfig_path).resolve()
        self.src_root = self.path.parent
        self.ignored_suffixes = ignored_suffixes

    def load(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(self.path, f"cannot read: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(self.path, f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(self.path, "top level must be an object")
        return data

    def read_accepted_set(self) -> set[str]:
        """Evaluate include globs, minus exclude globs, plus explicit files."""
        config = self.load()
        accepted: set[str] = set()

        for pattern in config.get("include") or []:
            for match in self._glob(pattern):
                if consider_file(match, self.ignored_suffixes):
                    accepted.add(match)

        for pattern in config.get("exclude") or []:
            for match in self._glob(pattern):
                accepted.discard(match)

        for entry in config.get("files") or []:
            if consider_file(entry, self.ignored_suffixes):
                accepted.add(str((self.src_root / entry).resolve()))

        return accepted

    def add_unit(self, unit: str) -> bool:
        """Mark ``unit`` as strict-checked. Returns False if it already was listed."""
        config = self.load()
        entry = config_entry(self.src_root, unit)
        exclude = list(config.get("exclude") or [])
        files = list(config.get("files") or [])

        if entry in exclude:
            exclude.remove(entry)
            config["exclude"] = exclude
        elif entry in files:
            return False
        else:
            config["files"] = sorted(set(files) | {entry})

        self._write(config)
        logger.info("Added %s to %s", entry, self.path.name)
        return True

    def _glob(self, pattern: str) -> list[str]:
        full = os.path.join(self.src_root, pattern)
        return [str(Path(p).resolve()) for p in glob.glob(full, recursive=True)]

    def _write(self, config: dict) -> None:
        try:
            write_json_atomic(self.path, config)
        except OSError as e:
            raise ConfigurationError(self.path, f"cannot write: {e}") from e


def write_json_atomic(path: Path, data: dict) -> None:
    """Write ``data`` as JSON to ``path``; readers see the old or the new file, never a partial one."""
    path = Path(path)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(data, indent=2))
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
