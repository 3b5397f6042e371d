"""Default clash handling: the first source's entry is kept."""

from __future__ import annotations

from typing import BinaryIO

from jar_assembler.core.model import RunState
from jar_assembler.core.staging import StagingArchive
from jar_assembler.strategies.base import BaseClashHandler, ClashStrategy


class FirstWins(BaseClashHandler):
    """Discards the incoming content."""

    @property
    def strategy(self) -> ClashStrategy:
        return ClashStrategy.FIRST_WINS

    def resolve(self, name: str, incoming: BinaryIO, staging: StagingArchive, state: RunState) -> None:
        return None
