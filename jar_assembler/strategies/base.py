"""Clash strategy identifiers and the abstract clash handler.

WHY: When a second source produces an entry name that is already in
the staging archive, a handful of well-known files must be merged
rather than dropped. Every strategy gets the same inputs, so the
resolver can dispatch to any of them generically.

HOW: ClashStrategy enumerates the strategies. BaseClashHandler is an
ABC whose ``resolve()`` receives the entry name, the incoming content
stream, the staging archive holding the existing entry, and the run
state.

RULES:
- Handlers may read, rewrite or keep the existing staged entry
- Handlers must not create entries other than ``name``
- Exceptions propagate to the copier, which records one error

To add a new strategy:
1. Add a member to ClashStrategy
2. Subclass BaseClashHandler in a new module
3. Register it in HANDLERS and add a rule to CLASH_RULES in
   strategies/__init__.py
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import BinaryIO

from jar_assembler.core.model import RunState
from jar_assembler.core.staging import StagingArchive


class ClashStrategy(str, enum.Enum):
    """Ways of resolving two entries with the same name."""

    MERGE_STRUCTURED_DATA = "merge-structured-data"
    CONCATENATE_LINES = "concatenate-lines"
    SIZE_THRESHOLD_OVERWRITE = "size-threshold-overwrite"
    FIRST_WINS = "first-wins"


class BaseClashHandler(ABC):
    """Abstract base for all clash handlers."""

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug

    @property
    @abstractmethod
    def strategy(self) -> ClashStrategy:
        """The strategy this handler implements."""

    @abstractmethod
    def resolve(
        self,
        name: str,
        incoming: BinaryIO,
        staging: StagingArchive,
        state: RunState,
    ) -> None:
        """Combine ``incoming`` with the staged entry ``name``.

        Args:
            name: Entry name present in both the staging archive and the
                  incoming source.
            incoming: Readable stream with the incoming entry's content.
            staging: The staging archive; ``staging.exists(name)`` is True.
            state: The run's state (error counter, latches).
        """
