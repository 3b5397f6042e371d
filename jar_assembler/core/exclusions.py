"""Fixed table of entry names that never reach the output archive."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Pattern

from jar_assembler.config import EXCLUDE_PATTERNS


class ExclusionRuleSet:
    """Decides whether an entry name is ever written.

    Patterns are full matches against the whole name, so ``LICENSE``
    excludes a top-level LICENSE file but not ``docs/LICENSE``.
    """

    def __init__(self, patterns: Optional[Iterable[str]] = None) -> None:
        source = EXCLUDE_PATTERNS if patterns is None else tuple(patterns)
        self._patterns: list[Pattern[str]] = [re.compile(p) for p in source]

    def excluded(self, name: str) -> bool:
        return any(p.fullmatch(name) for p in self._patterns)

    def __contains__(self, name: str) -> bool:
        return self.excluded(name)
