"""Data model shared by the entry sources, the copier and the run.

WHY: Directory trees and nested archives have nothing in common on
disk, but the copier must treat their entries identically. These
dataclasses are the contract between the sources that produce entries
and the copier and clash strategies that consume them.

HOW: Five groups of types:
  SourceKind / ClasspathItem: one classified classpath item
  EntryRecord               : one file or directory coming from a source
  RunState                  : per-run counters and latches
  CopyOutcome / CopyResult  : what the copier did with one entry
  AssemblyResult            : what a whole run produced

RULES:
- ClasspathItem is frozen; classification is redone on every run
- EntryRecord content is opened lazily and consumed at most once
- RunState is owned by exactly one run and never shared
- overwrite_latch_open only ever goes from True to False
- error_count never decreases
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Optional


class SourceKind(str, enum.Enum):
    """Classification of a classpath item by filesystem probe."""

    DIRECTORY = "directory"
    ARCHIVE = "archive"
    MISSING = "missing"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClasspathItem:
    """A classpath path string and the kind it was classified as."""

    path: str
    kind: SourceKind


@dataclass
class EntryRecord:
    """One file or directory produced by an entry source.

    RULES:
    - name: "/"-separated path relative to the source root, no leading
      or trailing "/"
    - opener: returns a fresh readable binary stream; None for directories
    - last_modified: epoch seconds from the source, or None
    - is_directory: True for directory markers (no content)
    """

    name: str
    opener: Optional[Callable[[], BinaryIO]] = None
    last_modified: Optional[float] = None
    is_directory: bool = False

    def open(self) -> BinaryIO:
        """Open the entry content for reading."""
        if self.opener is None:
            raise ValueError("{} has no content".format(self.name))
        return self.opener()


@dataclass
class RunState:
    """Mutable state of a single assembly run.

    WHY: The error counter, the multi-release flag and the log4j2
    overwrite latch change while entries are copied. Keeping them on a
    per-run object means two runs (e.g. in tests) never see each
    other's state.

    RULES:
    - Starts as error_count=0, multi_release_detected=False,
      overwrite_latch_open=True
    - Mutated only through the methods below
    """

    error_count: int = 0
    multi_release_detected: bool = False
    overwrite_latch_open: bool = True

    def record_error(self) -> None:
        self.error_count += 1

    def mark_multi_release(self) -> None:
        self.multi_release_detected = True

    def close_overwrite_latch(self) -> None:
        self.overwrite_latch_open = False


class CopyOutcome(str, enum.Enum):
    """What EntryCopier.copy() did with one entry."""

    EXCLUDED = "excluded"
    DIRECTORY = "directory"
    WRITTEN = "written"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class CopyResult:
    """Result of copying one entry. ``error`` is set only when FAILED."""

    name: str
    outcome: CopyOutcome
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.outcome is CopyOutcome.FAILED


@dataclass
class AssemblyResult:
    """Summary of a finished assembly run.

    RULES:
    - destination: where the archive was published
    - error_count: per-entry and per-source failures recorded
    - ok: True iff error_count == 0 (the archive is published either way)
    """

    destination: Path
    error_count: int
    multi_release: bool
    entry_count: int
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error_count == 0
