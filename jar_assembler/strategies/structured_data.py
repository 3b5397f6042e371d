"""Merge of Clojure data-reader maps (data_readers.clj / .cljs / .cljc).

WHY: Libraries register reader tags in a data_readers file at the root
of their jar. Keeping only the first file would silently drop the tags
of every later library.

HOW: Both the staged file and the incoming file are read as a single
EDN map with edn_format. The merged map starts from the incoming map
and is then updated with the staged map, so on a key collision the
staged (first-seen) value wins. The result is written back as EDN with
a trailing newline.

RULES:
- Existing (earlier classpath) keys take precedence over incoming keys
- Key order: incoming keys first, then keys only the existing map has
- Either side not being an EDN map is an error for this entry
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, BinaryIO

import edn_format

from jar_assembler.core.model import RunState
from jar_assembler.core.staging import StagingArchive
from jar_assembler.strategies.base import BaseClashHandler, ClashStrategy


def _read_map(text: str, origin: str) -> Mapping:
    value: Any = edn_format.loads(text)
    if not isinstance(value, Mapping):
        raise ValueError("{} does not contain an EDN map".format(origin))
    return value


def merge_maps(existing: Mapping, incoming: Mapping) -> dict:
    """Merge two maps, existing keys winning on collision."""
    merged = dict(incoming)
    merged.update(existing)
    return merged


class StructuredDataMerge(BaseClashHandler):
    """Merges EDN data-reader maps, first-seen entries winning."""

    @property
    def strategy(self) -> ClashStrategy:
        return ClashStrategy.MERGE_STRUCTURED_DATA

    def resolve(self, name: str, incoming: BinaryIO, staging: StagingArchive, state: RunState) -> None:
        incoming_map = _read_map(incoming.read().decode("utf-8"), "incoming " + name)
        existing_map = _read_map(staging.read_bytes(name).decode("utf-8"), "existing " + name)
        merged = merge_maps(existing_map, incoming_map)
        staging.overwrite_bytes(name, (edn_format.dumps(merged) + "\n").encode("utf-8"))
