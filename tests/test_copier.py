"""Unit tests for EntryCopier.

WHY: The copier is where exclusion, directory creation, first writes
and clash resolution meet. Getting the order of those checks wrong
changes which entries reach the output.

HOW: EntryRecords are built by hand with BytesIO openers and copied
into a real StagingArchive.

RULES:
- copy() never raises; failures come back as CopyOutcome.FAILED
"""

import io

from jar_assembler.config import LOG4J2_PLUGINS_FILE
from jar_assembler.core.copier import EntryCopier
from jar_assembler.core.exclusions import ExclusionRuleSet
from jar_assembler.core.model import CopyOutcome, EntryRecord, RunState
from jar_assembler.strategies import ClashResolver


def _record(name, data=b"", last_modified=None):
    return EntryRecord(name=name, opener=lambda: io.BytesIO(data), last_modified=last_modified)


def _copier(staging, state, **kwargs):
    kwargs.setdefault("resolver", ClashResolver(suppress_warnings=True))
    return EntryCopier(staging, state, **kwargs)


class TestExclusionAndDirectories:
    def test_excluded_name_is_not_written(self, staging, state):
        result = _copier(staging, state).copy(_record("META-INF/MANIFEST.MF", b"x"))
        assert result.outcome is CopyOutcome.EXCLUDED
        assert staging.names() == []

    def test_custom_exclusions(self, staging, state):
        copier = _copier(staging, state, exclusions=ExclusionRuleSet([r".*\.tmp"]))
        assert copier.copy(_record("a.tmp")).outcome is CopyOutcome.EXCLUDED
        assert copier.copy(_record("LICENSE")).outcome is CopyOutcome.WRITTEN

    def test_directory_record_creates_directory(self, staging, state):
        result = _copier(staging, state).copy(EntryRecord(name="a/b", is_directory=True))
        assert result.outcome is CopyOutcome.DIRECTORY
        assert staging.names() == ["a/", "a/b/"]

    def test_existing_directory_is_not_a_clash(self, staging, state):
        copier = _copier(staging, state)
        copier.copy(EntryRecord(name="a", is_directory=True))
        result = copier.copy(EntryRecord(name="a", is_directory=True))
        assert result.outcome is CopyOutcome.DIRECTORY


class TestWritesAndClashes:
    def test_first_write_keeps_timestamp(self, staging, state):
        result = _copier(staging, state).copy(_record("a/A.class", b"A", 1600000000.0))
        assert result.outcome is CopyOutcome.WRITTEN
        assert staging.read_bytes("a/A.class") == b"A"
        assert staging.last_modified("a/A.class") == 1600000000.0

    def test_second_copy_of_plain_file_keeps_first(self, staging, state):
        copier = _copier(staging, state)
        copier.copy(_record("a/A.class", b"first"))
        result = copier.copy(_record("a/A.class", b"second"))
        assert result.outcome is CopyOutcome.RESOLVED
        assert staging.read_bytes("a/A.class") == b"first"

    def test_target_overrides_name(self, staging, state):
        _copier(staging, state).copy(_record("MANIFEST.MF", b"m"), target="META-INF/MANIFEST.MF")
        assert staging.read_bytes("META-INF/MANIFEST.MF") == b"m"

    def test_log4j2_cache_sequence(self, staging):
        state = RunState()
        copier = _copier(staging, state)
        copier.copy(_record(LOG4J2_PLUGINS_FILE, b"1" * 1000))
        assert state.overwrite_latch_open
        copier.copy(_record(LOG4J2_PLUGINS_FILE, b"6" * 6000))
        assert not state.overwrite_latch_open
        copier.copy(_record(LOG4J2_PLUGINS_FILE, b"2" * 2000))
        assert staging.read_bytes(LOG4J2_PLUGINS_FILE) == b"6" * 6000

    def test_large_first_copy_closes_latch(self, staging):
        state = RunState()
        copier = _copier(staging, state)
        copier.copy(_record(LOG4J2_PLUGINS_FILE, b"L" * 20000))
        assert not state.overwrite_latch_open
        copier.copy(_record(LOG4J2_PLUGINS_FILE, b"s" * 10))
        assert staging.size(LOG4J2_PLUGINS_FILE) == 20000


class TestFailures:
    def test_unreadable_entry_returns_failed(self, staging, state, caplog):
        def _boom():
            raise OSError("disk on fire")

        result = _copier(staging, state).copy(EntryRecord(name="a.txt", opener=_boom))
        assert result.failed
        assert isinstance(result.error, OSError)
        assert not staging.exists("a.txt")
        assert "unable to copy file name=a.txt exception=OSError message=disk on fire" in caplog.text

    def test_name_not_encodable_as_utf8_fails_that_entry(self, staging, state):
        copier = _copier(staging, state)
        result = copier.copy(_record("bad\udcff.txt", b"x"))
        assert result.failed
        assert isinstance(result.error, UnicodeEncodeError)
        assert staging.names() == []
        assert copier.copy(_record("ok.txt", b"ok")).outcome is CopyOutcome.WRITTEN

    def test_failed_merge_keeps_existing_entry(self, staging, state):
        copier = _copier(staging, state)
        copier.copy(_record("data_readers.clj", b"{a b}"))
        result = copier.copy(_record("data_readers.clj", b"not a map"))
        assert result.failed
        assert staging.read_bytes("data_readers.clj") == b"{a b}"

    def test_copier_does_not_count_errors(self, staging, state):
        def _boom():
            raise OSError("nope")

        _copier(staging, state).copy(EntryRecord(name="a.txt", opener=_boom))
        assert state.error_count == 0
