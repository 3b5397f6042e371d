"""Overwrite-until-large heuristic for the Log4j2 plugin cache.

WHY: Log4j2Plugins.dat is a binary cache that each log4j2 jar ships
with its own plugins listed. It cannot be concatenated, and rebuilding
it would mean parsing its binary format. Larger copies list more
plugins, so small copies are allowed to be replaced until a copy above
the threshold has been written; from then on it is kept.

HOW: While the run's overwrite latch is open, the incoming content
replaces the staged entry and the new size is measured. A size above
LOG4J2_PLUGINS_THRESHOLD closes the latch. With the latch closed the
incoming content is ignored.

RULES:
- The latch only ever closes (RunState.close_overwrite_latch)
- The staged entry's timestamp is left unchanged on overwrite
- The first write of the file (in the copier) may also close the latch
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from jar_assembler.config import LOG4J2_PLUGINS_THRESHOLD
from jar_assembler.core.model import RunState
from jar_assembler.core.staging import StagingArchive
from jar_assembler.strategies.base import BaseClashHandler, ClashStrategy

logger = logging.getLogger(__name__)


def latch_after_write(name: str, size: int, state: RunState, debug: bool = False) -> None:
    """Close the overwrite latch once a large enough copy has been written."""
    if size > LOG4J2_PLUGINS_THRESHOLD:
        if debug:
            logger.debug("big enough, no more copying: %s (%d bytes)", name, size)
        state.close_overwrite_latch()


class SizeThresholdOverwrite(BaseClashHandler):
    """Lets small copies of the plugin cache be replaced by later ones."""

    @property
    def strategy(self) -> ClashStrategy:
        return ClashStrategy.SIZE_THRESHOLD_OVERWRITE

    def resolve(self, name: str, incoming: BinaryIO, staging: StagingArchive, state: RunState) -> None:
        if not state.overwrite_latch_open:
            if self.debug:
                logger.debug("ignoring %s", name)
            return
        if self.debug:
            logger.debug("overwriting %s", name)
        size = staging.overwrite(name, incoming)
        latch_after_write(name, size, state, debug=self.debug)
