"""Unit tests for the staging archive and publication.

WHY: The staging archive is where every clash strategy reads and
rewrites entries, and publish() is the only step that touches the
destination. Ordering, timestamps and atomic replacement are all
observable in the final jar.

HOW: Tests write entries into a StagingArchive, pack it, and inspect
the resulting ZIP with zipfile.

RULES:
- Timestamps are compared as ZIP date_time tuples
"""

import io
import zipfile

import pytest

from jar_assembler.config import ZIP_EPOCH
from jar_assembler.core.staging import StagingArchive, publish, zip_timestamp
from jar_assembler.errors import FatalSetupError

from conftest import JAR_ENTRY_TIME


class TestWriteAndQuery:
    def test_write_creates_parent_directories_first(self, staging):
        staging.write("a/b/c.txt", io.BytesIO(b"x"))
        assert staging.names() == ["a/", "a/b/", "a/b/c.txt"]
        assert staging.exists("a/b/c.txt")
        assert staging.has_directory("a/b")
        assert not staging.exists("a/b")

    def test_write_returns_size(self, staging):
        assert staging.write("f.bin", io.BytesIO(b"12345")) == 5
        assert staging.size("f.bin") == 5

    def test_names_are_case_sensitive(self, staging):
        staging.write("LICENSE", io.BytesIO(b"upper"))
        staging.write("license", io.BytesIO(b"lower"))
        assert staging.read_bytes("LICENSE") == b"upper"
        assert staging.read_bytes("license") == b"lower"

    def test_overwrite_keeps_timestamp(self, staging):
        staging.write("f", io.BytesIO(b"old"), last_modified=1234567890.0)
        staging.overwrite("f", io.BytesIO(b"newer"))
        assert staging.read_bytes("f") == b"newer"
        assert staging.last_modified("f") == 1234567890.0

    def test_overwrite_bytes(self, staging):
        staging.write("f", io.BytesIO(b"old"))
        assert staging.overwrite_bytes("f", b"replaced") == 8
        assert staging.read_bytes("f") == b"replaced"

    def test_failed_overwrite_keeps_previous_content(self, staging):
        class Broken(io.RawIOBase):
            def readinto(self, b):
                raise OSError("read failed")

        staging.write("f", io.BytesIO(b"keep me"))
        with pytest.raises(OSError):
            staging.overwrite("f", Broken())
        assert staging.read_bytes("f") == b"keep me"

    def test_failed_overwrite_bytes_leaves_no_partial_blob(self, staging, monkeypatch):
        staging.write("f", io.BytesIO(b"keep me"))
        blobs_before = sorted(p.name for p in (staging.root / "entries").iterdir())

        def _partial_copy(src, dst, *args):
            dst.write(src.read(3))
            raise OSError("disk full")

        monkeypatch.setattr("jar_assembler.core.staging.shutil.copyfileobj", _partial_copy)
        with pytest.raises(OSError):
            staging.overwrite_bytes("f", b"replacement")
        monkeypatch.undo()

        assert sorted(p.name for p in (staging.root / "entries").iterdir()) == blobs_before
        assert staging.read_bytes("f") == b"keep me"

    def test_reading_a_directory_fails(self, staging):
        staging.ensure_directory("d")
        with pytest.raises(KeyError):
            staging.read_bytes("d")


class TestZipTimestamp:
    def test_none_maps_to_zip_epoch(self):
        assert zip_timestamp(None) == ZIP_EPOCH

    def test_before_1980_is_clamped(self):
        assert zip_timestamp(0.0) == ZIP_EPOCH

    def test_beyond_platform_range_is_clamped(self):
        assert zip_timestamp(1e20) == (2107, 12, 31, 23, 59, 58)
        assert zip_timestamp(-1e20) == ZIP_EPOCH


class TestPack:
    def test_entries_in_creation_order(self, staging):
        staging.write("z.txt", io.BytesIO(b"z"))
        staging.write("a/a.txt", io.BytesIO(b"a"))
        archive_path, count = staging.pack("out.jar")
        with zipfile.ZipFile(archive_path) as zf:
            assert zf.namelist() == ["z.txt", "a/", "a/a.txt"]
        assert count == 3

    def test_source_timestamp_is_kept(self, staging, fixed_mtime, tmp_path):
        probe = tmp_path / "probe"
        probe.write_bytes(b"")
        epoch = fixed_mtime(probe)
        staging.write("dated", io.BytesIO(b"d"), last_modified=epoch)
        staging.write("undated", io.BytesIO(b"u"))
        archive_path, _ = staging.pack("out.jar")
        with zipfile.ZipFile(archive_path) as zf:
            assert zf.getinfo("dated").date_time == JAR_ENTRY_TIME
            assert zf.getinfo("undated").date_time == ZIP_EPOCH

    def test_directories_are_directory_entries(self, staging):
        staging.ensure_directory("x/y")
        archive_path, _ = staging.pack("out.jar")
        with zipfile.ZipFile(archive_path) as zf:
            infos = zf.infolist()
        assert [i.filename for i in infos] == ["x/", "x/y/"]
        assert all(i.is_dir() for i in infos)

    def test_discard_removes_staging_dir(self):
        archive = StagingArchive.create(prefix="jar_assembler_test_")
        archive.write("f", io.BytesIO(b"f"))
        archive.discard()
        assert not archive.root.exists()


class TestPublish:
    def test_moves_into_new_parent_directories(self, staging, tmp_path):
        staging.write("f", io.BytesIO(b"f"))
        packed, _ = staging.pack("app.jar")
        destination = tmp_path / "target" / "deep" / "app.jar"
        publish(packed, destination)
        assert destination.is_file()
        assert not packed.exists()

    def test_replaces_existing_destination(self, staging, tmp_path):
        destination = tmp_path / "app.jar"
        destination.write_bytes(b"previous build")
        staging.write("f", io.BytesIO(b"f"))
        packed, _ = staging.pack("app.jar")
        publish(packed, destination)
        with zipfile.ZipFile(destination) as zf:
            assert zf.read("f") == b"f"

    def test_failure_is_fatal(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"not a directory")
        missing = tmp_path / "missing.jar"
        with pytest.raises(FatalSetupError):
            publish(missing, blocker / "app.jar")
