"""Archive-backed staging area and atomic publication of the result.

WHY: Entries arrive one at a time from many sources and clash
strategies need to read back, rewrite and re-measure entries that are
already "in the archive". A ZIP file cannot be edited in place, so the
run stages every entry in a private temporary directory that behaves
like a writable archive, then packs it into a real ZIP container in one
pass and moves that file over the destination.

HOW: StagingArchive keeps an insertion-ordered dict from archive entry
name to a staged entry. File content lives in numbered blob files under
the staging directory, so entry names never touch the host filesystem
(no case folding, no path traversal, no file/directory collisions).
pack() writes the ZIP in first-creation order. publish() moves the
packed file to the destination with os.replace().

RULES:
- Directory entries are keyed with a trailing "/", files without
- Writing a file creates any missing parent directory entries first
- Entries with no source timestamp get ZIP_EPOCH so output is reproducible
- Failure to create, pack or publish raises FatalSetupError
- discard() is best-effort and never raises
"""

from __future__ import annotations

import errno
import io
import itertools
import logging
import os
import shutil
import tempfile
import time
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional
from uuid import uuid4

from jar_assembler.config import ZIP_EPOCH
from jar_assembler.errors import FatalSetupError

logger = logging.getLogger(__name__)

_ZIP_LATEST = (2107, 12, 31, 23, 59, 58)


@dataclass
class _StagedEntry:
    blob: Optional[Path]
    last_modified: Optional[float] = None


def zip_timestamp(last_modified: Optional[float]) -> tuple:
    """Convert epoch seconds to a ZIP date_time tuple, clamped to the format's range."""
    if last_modified is None:
        return ZIP_EPOCH
    try:
        stamp = time.localtime(last_modified)[:6]
    except (OverflowError, OSError, ValueError):
        return ZIP_EPOCH if last_modified < 0 else _ZIP_LATEST
    if stamp < ZIP_EPOCH:
        return ZIP_EPOCH
    if stamp > _ZIP_LATEST:
        return _ZIP_LATEST
    return stamp


class StagingArchive:
    """Writable, archive-shaped staging area for one run."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self._blob_dir = root / "entries"
        self._blob_dir.mkdir(parents=True, exist_ok=True)
        self._entries: dict[str, _StagedEntry] = {}
        self._blob_ids = itertools.count(1)

    @classmethod
    def create(cls, prefix: str = "jar_assembler_") -> "StagingArchive":
        """Create a staging area in a fresh temporary directory."""
        try:
            return cls(Path(tempfile.mkdtemp(prefix=prefix)))
        except OSError as exc:
            raise FatalSetupError("unable to create staging area: {}".format(exc)) from exc

    # -- queries -----------------------------------------------------------

    def exists(self, name: str) -> bool:
        return name in self._entries

    def has_directory(self, name: str) -> bool:
        return _dir_key(name) in self._entries

    def names(self) -> list[str]:
        """All entry names in first-creation order (directories end in "/")."""
        return list(self._entries)

    def size(self, name: str) -> int:
        return self._blob(name).stat().st_size

    def read_bytes(self, name: str) -> bytes:
        return self._blob(name).read_bytes()

    def last_modified(self, name: str) -> Optional[float]:
        return self._entries[name].last_modified

    # -- mutation ----------------------------------------------------------

    def ensure_directory(self, name: str) -> None:
        """Create a directory entry and any missing parents."""
        if not name:
            return
        parts = name.split("/")
        for depth in range(1, len(parts) + 1):
            key = _dir_key("/".join(parts[:depth]))
            if key not in self._entries:
                self._entries[key] = _StagedEntry(blob=None)

    def write(self, name: str, stream: BinaryIO, last_modified: Optional[float] = None) -> int:
        """Write a new file entry from a stream and return its size in bytes."""
        parent, _, _ = name.rpartition("/")
        self.ensure_directory(parent)
        blob = self._fill_blob(stream)
        self._entries[name] = _StagedEntry(blob=blob, last_modified=last_modified)
        return blob.stat().st_size

    def overwrite(self, name: str, stream: BinaryIO) -> int:
        """Replace an existing file entry's content, keeping its timestamp.

        The new content is staged in a fresh blob before the old one is
        dropped, so a failed read leaves the previous content intact.
        """
        entry = self._entries[name]
        blob = self._fill_blob(stream)
        old, entry.blob = entry.blob, blob
        if old is not None:
            old.unlink()
        return blob.stat().st_size

    def overwrite_bytes(self, name: str, data: bytes) -> int:
        entry = self._entries[name]
        blob = self._fill_blob(io.BytesIO(data))
        old, entry.blob = entry.blob, blob
        if old is not None:
            old.unlink()
        return len(data)

    def set_last_modified(self, name: str, last_modified: Optional[float]) -> None:
        self._entries[name].last_modified = last_modified

    # -- packing and cleanup -------------------------------------------------

    def pack(self, archive_name: str) -> tuple[Path, int]:
        """Write every staged entry into a ZIP file inside the staging area.

        Returns:
            The path of the packed archive and the number of entries in it.
        """
        archive_path = self.root / archive_name
        try:
            with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for arcname, entry in self._entries.items():
                    info = zipfile.ZipInfo(arcname, date_time=zip_timestamp(entry.last_modified))
                    if entry.blob is None:
                        info.external_attr = (0o40755 << 16) | 0x10
                        zf.writestr(info, b"")
                        continue
                    info.compress_type = zipfile.ZIP_DEFLATED
                    info.external_attr = 0o644 << 16
                    info.file_size = entry.blob.stat().st_size
                    with entry.blob.open("rb") as src, zf.open(info, "w") as dst:
                        shutil.copyfileobj(src, dst)
        except OSError as exc:
            raise FatalSetupError("unable to write staged archive: {}".format(exc)) from exc
        return archive_path, len(self._entries)

    def discard(self) -> None:
        """Remove the staging directory tree."""
        if self.root.exists():
            try:
                shutil.rmtree(self.root)
            except OSError:
                logger.warning("Failed to clean up staging dir: %s", self.root)

    # -- internals -----------------------------------------------------------

    def _blob(self, name: str) -> Path:
        blob = self._entries[name].blob
        if blob is None:
            raise IsADirectoryError(name)
        return blob

    def _new_blob_path(self) -> Path:
        return self._blob_dir / "{:08d}".format(next(self._blob_ids))

    def _fill_blob(self, stream: BinaryIO) -> Path:
        blob = self._new_blob_path()
        try:
            with blob.open("wb") as out:
                shutil.copyfileobj(stream, out)
        except BaseException:
            if blob.exists():
                blob.unlink()
            raise
        return blob


def _dir_key(name: str) -> str:
    return name.rstrip("/") + "/"


def _atomic_temp_path(target_path: Path) -> Path:
    """Create a unique temp path next to the target for atomic replacement."""
    return target_path.parent / ".{}.{}.tmp".format(target_path.name, uuid4().hex)


def publish(staged: Path, destination: Path) -> None:
    """Move the packed archive to its destination, replacing any existing file.

    WHY: Readers of the destination must see either the previous archive
    or the complete new one, never a half-written file.

    HOW: os.replace() when staging and destination share a filesystem.
    Across filesystems the archive is first copied next to the
    destination and then renamed over it.

    RULES:
    - Destination parent directories are created as needed
    - Any OSError becomes FatalSetupError
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            os.replace(staged, destination)
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise
            temp_path = _atomic_temp_path(destination)
            try:
                shutil.copyfile(staged, temp_path)
                os.replace(temp_path, destination)
            finally:
                if temp_path.exists():
                    temp_path.unlink()
    except OSError as exc:
        raise FatalSetupError("unable to publish {}: {}".format(destination, exc)) from exc
