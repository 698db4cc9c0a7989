"""TypeScript import resolver using regex patterns."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from strict_migrate.analysis.graph_models import WarningKind
from strict_migrate.resolver.base import BaseResolver

logger = logging.getLogger(__name__)

# Strings are matched first so comment markers inside them are kept
_STRING_OR_COMMENT_RE = re.compile(
    r"""(?P<string>'(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`)"""
    r"""|(?P<block>/\*.*?(?:\*/|\Z))"""
    r"""|//[^\n]*""",
    re.DOTALL,
)

# import x from '...', import { a, b } from '...', import '...', export * from '...'
_STATIC_IMPORT_RE = re.compile(
    r"""(?:^|[;}\s])(?:import|export)\s+(?:type\s+)?"""
    r"""(?:[\w$*{},\s]+?\s+from\s+)?['"]([^'"\n]+)['"]""",
)
# require('...') and import('...')
_CALL_IMPORT_RE = re.compile(r"""\b(?:require|import)\s*\(\s*['"]([^'"\n]+)['"]\s*\)""")

# Assets and plain JS are not compilation units (JS is assumed to ship a .d.ts)
_NON_SOURCE_SUFFIXES = (".less", ".css", ".svg", ".json", ".js", ".jsx")
_RESOLVE_SUFFIXES = (".ts", ".tsx", ".d.ts")
_BARREL_INDEXES = ("index.ts", "index.tsx")


def _keep_strings(m: re.Match) -> str:
    if m.group("string") is not None:
        return m.group("string")
    return " " if m.group("block") is not None else ""


def strip_comments(source: str) -> str:
    """Remove block and line comments, leaving string and template literals intact."""
    return _STRING_OR_COMMENT_RE.sub(_keep_strings, source)


def extract_specifiers(source: str) -> list[str]:
    """Return module specifiers imported by ``source``, in file order."""
    source = strip_comments(source)
    found: list[tuple[int, str]] = []
    for regex in (_STATIC_IMPORT_RE, _CALL_IMPORT_RE):
        for m in regex.finditer(source):
            found.append((m.start(1), m.group(1)))
    found.sort()
    return [spec for _, spec in found]


class TypeScriptResolver(BaseResolver):
    extensions = (".ts", ".tsx")

    def _resolve(self, unit: Path) -> list[str]:
        try:
            source = unit.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            self._warn(WarningKind.RESOLUTION, unit, "", f"Unreadable file: {e}")
            return []

        resolved: list[str] = []
        for specifier in extract_specifiers(source):
            if specifier.endswith(_NON_SOURCE_SUFFIXES):
                logger.debug("Skipping non-source import %s", specifier)
                continue
            # Bare package names ("react") never contain a slash
            if "/" not in specifier:
                continue
            target = self._resolve_specifier(unit, specifier)
            if target is not None:
                resolved.append(target)
        return resolved

    def _resolve_specifier(self, unit: Path, specifier: str) -> str | None:
        if specifier.startswith(("./", "../")):
            base = os.path.join(unit.parent, specifier)
        else:
            # Non-relative specifiers ("src/...") are mapped onto the source root
            base = os.path.join(self.src_root, specifier)
        base = os.path.normpath(base)

        for suffix in _RESOLVE_SUFFIXES:
            candidate = Path(base + suffix)
            if candidate.is_file():
                return str(candidate.resolve())

        path = Path(base)
        if path.is_dir():
            return self._resolve_barrel(unit, specifier, path)
        if path.is_file():
            return str(path.resolve())

        self._warn(
            WarningKind.RESOLUTION, unit, specifier,
            f"Unresolved import {self._relative(base)}",
        )
        return None

    def _resolve_barrel(self, unit: Path, specifier: str, directory: Path) -> str | None:
        for name in _BARREL_INDEXES:
            index = directory / name
            if index.is_file():
                # The real dependency is whatever the index re-exports
                self._warn(
                    WarningKind.STRUCTURAL_ASSUMPTION, unit, specifier,
                    f"Barrel import: {self._relative(directory)}",
                )
                return str(index.resolve())
        if (directory / "index.js").is_file():
            return None
        self._warn(
            WarningKind.RESOLUTION, unit, specifier,
            f"Importing a directory without an index.ts file: {self._relative(directory)}",
        )
        return None
