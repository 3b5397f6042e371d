"""Entry source for a nested archive (jar) on the classpath.

WHY: Dependencies arrive as jar files. Their entries are merged into
the output without extracting the jar to disk first.

HOW: Opens the jar with zipfile and walks its entries in stored order.
Each file record's opener streams that member straight out of the jar.
Entries under META-INF/versions/ mark the run as multi-release.

RULES:
- Order is the archive's own entry order
- Directory markers become directory records (trailing "/" dropped)
- A leading "/" on an entry name is dropped
- last_modified comes from the entry's stored DOS timestamp
- Any entry under META-INF/versions/ sets multi_release_detected
"""

from __future__ import annotations

import time
import zipfile
from functools import partial
from typing import Iterator, Optional

from jar_assembler.config import VERSIONED_RELEASE_PREFIX
from jar_assembler.core.model import EntryRecord
from jar_assembler.sources.base import EntrySource


def _entry_time(info: zipfile.ZipInfo) -> Optional[float]:
    try:
        return time.mktime(info.date_time + (0, 0, -1))
    except (OverflowError, ValueError):
        return None


class ArchiveReader(EntrySource):
    """Streams the entries of one jar file."""

    def entries(self) -> Iterator[EntryRecord]:
        with zipfile.ZipFile(self.path) as archive:
            for info in archive.infolist():
                name = info.filename.lstrip("/")
                if name.startswith(VERSIONED_RELEASE_PREFIX):
                    self.state.mark_multi_release()
                if info.is_dir():
                    name = name.rstrip("/")
                    if name:
                        yield EntryRecord(name=name, is_directory=True)
                    continue
                yield EntryRecord(
                    name=name,
                    opener=partial(archive.open, info),
                    last_modified=_entry_time(info),
                )
