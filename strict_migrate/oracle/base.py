"""Abstract validation oracle."""

from __future__ import annotations

import abc
from typing import Iterable

from strict_migrate.models import ValidationVerdict


class BaseOracle(abc.ABC):
    """A long-lived checker that reports an error count for one tentative change.

    Used as a context manager: entering starts it, leaving always stops it.
    Submissions must not overlap.
    """

    @abc.abstractmethod
    def start(self) -> None:
        """Acquire the checker against a private copy of the baseline config."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Release the checker and its private state. Safe to call twice."""

    @abc.abstractmethod
    def try_checking(self, units: Iterable[str]) -> ValidationVerdict:
        """Tentatively switch ``units`` on, relative to the baseline, and wait for a verdict."""

    def restart(self) -> None:
        self.stop()
        self.start()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False
