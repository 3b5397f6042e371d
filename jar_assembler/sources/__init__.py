"""Entry sources: one adapter per kind of classpath item.

WHY: The walker needs a single lookup from a classified classpath item
to the adapter that can enumerate it.

HOW: SOURCES maps SourceKind to the adapter *class*. Missing and
unknown items have no adapter.

RULES:
- Only DIRECTORY and ARCHIVE have adapters
- Every adapter subclasses EntrySource
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jar_assembler.core.model import SourceKind
from jar_assembler.sources.archive import ArchiveReader
from jar_assembler.sources.directory import DirectoryWalker

if TYPE_CHECKING:
    from jar_assembler.sources.base import EntrySource

SOURCES: dict[SourceKind, type[EntrySource]] = {
    SourceKind.DIRECTORY: DirectoryWalker,
    SourceKind.ARCHIVE: ArchiveReader,
}
