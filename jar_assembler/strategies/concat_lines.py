"""Concatenation of service-provider declarations (META-INF/services/*).

WHY: java.util.ServiceLoader reads every provider class listed in
META-INF/services/<interface>. Several jars commonly declare providers
for the same interface, and all of them must survive the merge.

HOW: Reads the staged lines and the incoming lines, writes back the
staged lines, one blank line, then the incoming lines.

RULES:
- Existing lines come first, incoming lines after
- Duplicates are kept (no dedup)
- Separator is exactly one blank line; output ends with a newline
"""

from __future__ import annotations

from typing import BinaryIO

from jar_assembler.core.model import RunState
from jar_assembler.core.staging import StagingArchive
from jar_assembler.strategies.base import BaseClashHandler, ClashStrategy


def concatenate_lines(existing: list[str], incoming: list[str]) -> str:
    return "\n".join(existing + [""] + incoming) + "\n"


class ConcatenateLines(BaseClashHandler):
    """Appends incoming service declarations after the existing ones."""

    @property
    def strategy(self) -> ClashStrategy:
        return ClashStrategy.CONCATENATE_LINES

    def resolve(self, name: str, incoming: BinaryIO, staging: StagingArchive, state: RunState) -> None:
        incoming_lines = incoming.read().decode("utf-8").splitlines()
        existing_lines = staging.read_bytes(name).decode("utf-8").splitlines()
        staging.overwrite_bytes(name, concatenate_lines(existing_lines, incoming_lines).encode("utf-8"))
