"""Entry source for a directory tree on the classpath.

WHY: Compiled classes and resources of the project itself live in
plain directories. Every regular file below the directory becomes an
entry named by its path relative to the directory root.

HOW: os.walk() top-down with followlinks=True. Subdirectory and file
names are sorted so the same tree always produces the same order. Each
directory yields a directory record before its files. A directory whose
(device, inode) matches one of its own ancestors is pruned, which breaks
symlink cycles while still following aliases to sibling directories.

RULES:
- The root directory itself produces no record
- Names use "/" separators on every platform
- last_modified is the source file's mtime
- Only regular files (after following links) produce file records
- Broken symlinks, unlistable directories and cycles go to ``failures``
"""

from __future__ import annotations

import errno
import logging
import os
from functools import partial
from pathlib import Path
from typing import Iterator

from jar_assembler.core.model import EntryRecord
from jar_assembler.sources.base import EntrySource

logger = logging.getLogger(__name__)


class DirectoryWalker(EntrySource):
    """Walks a directory tree, following symbolic links."""

    def entries(self) -> Iterator[EntryRecord]:
        root = self.path
        root_stat = os.stat(root)
        # (device, inode) of every directory on the path from root to dirpath
        ancestors: dict[str, frozenset[tuple[int, int]]] = {
            os.fspath(root): frozenset([(root_stat.st_dev, root_stat.st_ino)]),
        }

        def _on_error(exc: OSError) -> None:
            self.failures.append((exc.filename or str(root), exc))

        for dirpath, dirnames, filenames in os.walk(root, followlinks=True, onerror=_on_error):
            current = Path(dirpath)
            if current != root:
                yield EntryRecord(name=current.relative_to(root).as_posix(), is_directory=True)

            lineage = ancestors.pop(dirpath)
            dirnames.sort()
            for dirname in list(dirnames):
                full = os.path.join(dirpath, dirname)
                try:
                    st = os.stat(full)
                except OSError as exc:
                    dirnames.remove(dirname)
                    self.failures.append((full, exc))
                    continue
                key = (st.st_dev, st.st_ino)
                if key in lineage:
                    dirnames.remove(dirname)
                    self.failures.append(
                        (full, OSError(errno.ELOOP, "symbolic link cycle", full))
                    )
                    continue
                ancestors[full] = lineage | {key}

            for filename in sorted(filenames):
                full = os.path.join(dirpath, filename)
                if not os.path.isfile(full):
                    if os.path.islink(full):
                        self.failures.append(
                            (full, FileNotFoundError(errno.ENOENT, "broken symbolic link", full))
                        )
                    continue
                try:
                    last_modified = os.stat(full).st_mtime
                except OSError as exc:
                    self.failures.append((full, exc))
                    continue
                name = Path(full).relative_to(root).as_posix()
                if self.verbose:
                    logger.info("%s/%s", root, name)
                yield EntryRecord(
                    name=name,
                    opener=partial(open, full, "rb"),
                    last_modified=last_modified,
                )
