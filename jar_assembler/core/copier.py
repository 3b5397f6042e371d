"""Per-entry copy-or-merge decision.

WHY: Every entry from every source, plus the generated manifest, goes
through the same four-way decision: drop it, create a directory, write
it fresh, or resolve a clash. Keeping that decision in one place is
what makes exclusion and clash rules apply uniformly.

HOW: EntryCopier.copy() checks the exclusion table, then the record
kind, then whether the staging archive already has the name. New files
are streamed into the staging archive with their source timestamp.
Existing names go to the ClashResolver. A first write of the Log4j2
plugin cache is measured so a large copy closes the overwrite latch.

RULES:
- Exclusion is checked first, for every record
- A name that cannot be encoded as UTF-8 fails that entry only
- copy() never raises: failures come back as CopyOutcome.FAILED
- Each failure is logged once here; the caller counts it
- The content stream is opened and closed inside copy()
"""

from __future__ import annotations

import logging
from typing import Optional

from jar_assembler.config import LOG4J2_PLUGINS_FILE
from jar_assembler.core.exclusions import ExclusionRuleSet
from jar_assembler.core.model import CopyOutcome, CopyResult, EntryRecord, RunState
from jar_assembler.core.staging import StagingArchive
from jar_assembler.strategies import ClashResolver
from jar_assembler.strategies.size_threshold import latch_after_write

logger = logging.getLogger(__name__)


class EntryCopier:
    """Copies entries into the staging archive, resolving clashes."""

    def __init__(
        self,
        staging: StagingArchive,
        state: RunState,
        exclusions: Optional[ExclusionRuleSet] = None,
        resolver: Optional[ClashResolver] = None,
        debug: bool = False,
    ) -> None:
        self.staging = staging
        self.state = state
        self.exclusions = exclusions or ExclusionRuleSet()
        self.resolver = resolver or ClashResolver(debug=debug)
        self.debug = debug

    def copy(self, record: EntryRecord, target: Optional[str] = None) -> CopyResult:
        """Copy one record into the staging archive.

        Args:
            record: The entry to copy. Its ``name`` drives exclusion and
                    clash strategy selection.
            target: Entry name to write under, when it differs from
                    ``record.name`` (the generated manifest).

        Returns:
            CopyResult describing what happened.
        """
        name = record.name
        target = target or name

        if self.exclusions.excluded(name):
            if self.debug:
                logger.debug("excluded %s", name)
            return CopyResult(name, CopyOutcome.EXCLUDED)

        try:
            # ZIP entry names are stored as UTF-8
            target.encode("utf-8")
            if record.is_directory:
                self.staging.ensure_directory(target)
                return CopyResult(name, CopyOutcome.DIRECTORY)

            with record.open() as stream:
                if self.staging.exists(target):
                    self.resolver.resolve(target, stream, self.staging, self.state)
                    return CopyResult(name, CopyOutcome.RESOLVED)
                size = self.staging.write(target, stream, record.last_modified)

            if target == LOG4J2_PLUGINS_FILE:
                if self.debug:
                    logger.debug("copied %s %d", target, size)
                latch_after_write(target, size, self.state, debug=self.debug)
            return CopyResult(name, CopyOutcome.WRITTEN)
        except Exception as exc:
            logger.error(
                "unable to copy file name=%s exception=%s message=%s",
                name,
                type(exc).__name__,
                exc,
            )
            return CopyResult(name, CopyOutcome.FAILED, error=exc)
