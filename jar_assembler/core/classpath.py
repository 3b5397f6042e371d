"""Classpath classification and the walk over all classpath items.

WHY: A classpath is an ordered list of directories and jars, with the
occasional stale or odd entry. Each item has to be recognised by
probing the filesystem, then handed to the right entry source, in the
given order, because the first source to introduce a name owns it.

HOW: classify() probes one path. ClasspathWalker.walk() classifies each
item, warns about missing and unknown items, looks the adapter up in
SOURCES and feeds every record through the EntryCopier. Copy failures,
enumeration failures and unreadable archives are each counted once in
RunState.error_count.

RULES:
- Probe order: missing, directory, regular file matching .jar, unknown
- Missing items warn and are skipped
- Unknown items warn unless their name is excluded (then skipped quietly)
- Thin mode skips archives entirely
- Items are processed strictly in classpath order, one at a time
"""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional

from jar_assembler.config import ARCHIVE_FILE_RE
from jar_assembler.core.copier import EntryCopier
from jar_assembler.core.exclusions import ExclusionRuleSet
from jar_assembler.core.model import ClasspathItem, RunState, SourceKind
from jar_assembler.sources import SOURCES
from jar_assembler.sources.base import EntrySource

logger = logging.getLogger(__name__)


def split_classpath(classpath: Optional[str]) -> List[str]:
    """Split a classpath string on the platform path separator.

    Falls back to the CLASSPATH environment variable when ``classpath``
    is None. Empty items are dropped.
    """
    if classpath is None:
        classpath = os.getenv("CLASSPATH", "")
    return [item for item in classpath.split(os.pathsep) if item]


def classify(item: str) -> ClasspathItem:
    """Classify one classpath item by probing the filesystem."""
    p = Path(item)
    if not p.exists():
        kind = SourceKind.MISSING
    elif p.is_dir():
        kind = SourceKind.DIRECTORY
    elif p.is_file() and ARCHIVE_FILE_RE.search(str(p)):
        kind = SourceKind.ARCHIVE
    else:
        kind = SourceKind.UNKNOWN
    return ClasspathItem(path=item, kind=kind)


class ClasspathWalker:
    """Drives every classpath item through its entry source and the copier."""

    def __init__(
        self,
        copier: EntryCopier,
        state: RunState,
        exclusions: Optional[ExclusionRuleSet] = None,
        thin: bool = False,
        verbose: bool = False,
        debug: bool = False,
    ) -> None:
        self.copier = copier
        self.state = state
        self.exclusions = exclusions or ExclusionRuleSet()
        self.thin = thin
        self.verbose = verbose
        self.debug = debug
        self.warnings: list[str] = []

    def walk(self, items: Iterable[str]) -> None:
        for item in items:
            self.copy_source(classify(item))

    def copy_source(self, item: ClasspathItem) -> None:
        if item.kind is SourceKind.MISSING:
            self._warn("could not find classpath entry", item.path)
            return

        if item.kind is SourceKind.UNKNOWN:
            if self._excluded_item(item.path):
                if self.debug:
                    logger.debug("excluded %s", item.path)
            else:
                self._warn("ignoring unknown file type", item.path)
            return

        if item.kind is SourceKind.ARCHIVE and self.thin:
            return

        if self.verbose:
            logger.info("%s", item.path)
        source = SOURCES[item.kind](Path(item.path), self.state, verbose=self.verbose)
        self._consume(source)

    def _consume(self, source: EntrySource) -> None:
        try:
            for record in source.entries():
                result = self.copier.copy(record)
                if result.failed:
                    self.state.record_error()
        except (OSError, zipfile.BadZipFile) as exc:
            logger.error(
                "unable to read classpath entry path=%s exception=%s message=%s",
                source.path,
                type(exc).__name__,
                exc,
            )
            self.state.record_error()

        for name, exc in source.failures:
            logger.error(
                "unable to copy file name=%s exception=%s message=%s",
                name,
                type(exc).__name__,
                exc,
            )
            self.state.record_error()

    def _excluded_item(self, path: str) -> bool:
        return self.exclusions.excluded(path) or self.exclusions.excluded(Path(path).name)

    def _warn(self, message: str, path: str) -> None:
        logger.warning("%s path=%s", message, path)
        self.warnings.append("{}: {}".format(message, path))
