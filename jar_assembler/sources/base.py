"""Abstract entry source.

WHY: The classpath walker drives directory trees and nested archives
the same way: ask the source for its entries, hand each one to the
copier. This base class is the seam that keeps the walker ignorant of
where entries come from.

HOW: EntrySource is an ABC with one requirement, ``entries()``, a
generator of EntryRecord objects in the source's own order. Problems
met while enumerating (an unreadable subdirectory, a symlink cycle) are
appended to ``failures`` instead of stopping the generator.

RULES:
- Entries are yielded in a deterministic order for a given source
- Each record's content is opened by the consumer, inside its own
  error handling, so one unreadable file never stops the generator
- Errors that make the whole source unreadable propagate from the
  generator and are handled by the walker
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator

from jar_assembler.core.model import EntryRecord, RunState


class EntrySource(ABC):
    """One classpath item viewed as an ordered sequence of entries."""

    def __init__(self, path: Path, state: RunState, verbose: bool = False) -> None:
        self.path = path
        self.state = state
        self.verbose = verbose
        self.failures: list[tuple[str, BaseException]] = []

    @abstractmethod
    def entries(self) -> Iterator[EntryRecord]:
        """Yield the entries of this source in order."""
