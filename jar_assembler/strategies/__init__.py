"""Clash strategy table and resolver: pluggable merge hub.

WHY: The copier must pick a merge rule for a clashing entry from its
name alone. An ordered table of (pattern, strategy) pairs keeps the
selection explicit, testable in isolation, and trivial to extend.

HOW: CLASH_RULES is evaluated top to bottom with re.search; the first
match wins and FIRST_WINS is the fallback. HANDLERS maps each strategy
to its handler *class*. ClashResolver instantiates the handlers once
per run, logs the clash warning and dispatches.

RULES:
- Selection depends only on the entry name, never on content
- Every dispatch logs "clashing jar item" unless warnings are suppressed
- Every handler listed here must be importable without side effects
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, BinaryIO, Pattern

from jar_assembler.config import LOG4J2_PLUGINS_FILE
from jar_assembler.core.model import RunState
from jar_assembler.core.staging import StagingArchive
from jar_assembler.strategies.base import ClashStrategy
from jar_assembler.strategies.concat_lines import ConcatenateLines
from jar_assembler.strategies.first_wins import FirstWins
from jar_assembler.strategies.size_threshold import SizeThresholdOverwrite
from jar_assembler.strategies.structured_data import StructuredDataMerge

if TYPE_CHECKING:
    from jar_assembler.strategies.base import BaseClashHandler

logger = logging.getLogger(__name__)

CLASH_RULES: tuple[tuple[Pattern[str], ClashStrategy], ...] = (
    (re.compile(r"data_readers\.clj[sc]?$"), ClashStrategy.MERGE_STRUCTURED_DATA),
    (re.compile(r"^META-INF/services/"), ClashStrategy.CONCATENATE_LINES),
    (re.compile("^" + re.escape(LOG4J2_PLUGINS_FILE) + "$"), ClashStrategy.SIZE_THRESHOLD_OVERWRITE),
)

HANDLERS: dict[ClashStrategy, type[BaseClashHandler]] = {
    ClashStrategy.MERGE_STRUCTURED_DATA: StructuredDataMerge,
    ClashStrategy.CONCATENATE_LINES: ConcatenateLines,
    ClashStrategy.SIZE_THRESHOLD_OVERWRITE: SizeThresholdOverwrite,
    ClashStrategy.FIRST_WINS: FirstWins,
}


def select_strategy(name: str) -> ClashStrategy:
    """Pick the clash strategy for an entry name (first matching rule)."""
    for pattern, strategy in CLASH_RULES:
        if pattern.search(name):
            return strategy
    return ClashStrategy.FIRST_WINS


class ClashResolver:
    """Resolves clashing entries for one run."""

    def __init__(self, suppress_warnings: bool = False, debug: bool = False) -> None:
        self.suppress_warnings = suppress_warnings
        self._handlers = {strategy: cls(debug=debug) for strategy, cls in HANDLERS.items()}

    def resolve(self, name: str, incoming: BinaryIO, staging: StagingArchive, state: RunState) -> ClashStrategy:
        strategy = select_strategy(name)
        if not self.suppress_warnings:
            logger.warning("clashing jar item path=%s strategy=%s", name, strategy.value)
        self._handlers[strategy].resolve(name, incoming, staging, state)
        return strategy
