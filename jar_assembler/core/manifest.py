"""Generation of the output archive's META-INF/MANIFEST.MF.

WHY: Input manifests are excluded (they describe their own jar, and
signed-jar metadata would be invalid after merging), so the output
needs a fresh minimal manifest: format version, who built it, and the
Main-Class / Multi-Release attributes the JVM actually reads.

HOW: build_manifest() renders the text. ManifestGenerator wraps it in
an EntryRecord and sends it through the same EntryCopier as every other
entry, under the exclusion name MANIFEST.MF and the target
META-INF/MANIFEST.MF.

RULES:
- Header: Manifest-Version, Built-By, Build-Python
- Build-Python is the interpreter version cut at the first character
  that is neither a digit nor a dot ("3.13.0rc1" -> "3.13.0")
- "Multi-Release: true" only when a versioned entry was seen
- "Main-Class" only when configured, with "-" translated to "_"
- Lines end in "\n"
- The record carries no timestamp, so the archive gets ZIP_EPOCH
"""

from __future__ import annotations

import io
import logging
import platform
import re
from typing import Optional

from jar_assembler.config import (
    BUILDER_IDENTITY,
    MANIFEST_ENTRY,
    MANIFEST_EXCLUSION_NAME,
    MANIFEST_VERSION,
)
from jar_assembler.core.copier import EntryCopier
from jar_assembler.core.model import CopyResult, EntryRecord

logger = logging.getLogger(__name__)

_VERSION_SUFFIX_RE = re.compile(r"[^0-9.].*$")


def platform_version(version: Optional[str] = None) -> str:
    """Return the build platform version without any pre-release/build suffix."""
    raw = version if version is not None else platform.python_version()
    return _VERSION_SUFFIX_RE.sub("", raw)


def build_manifest(
    main_class: Optional[str] = None,
    multi_release: bool = False,
    version: Optional[str] = None,
) -> str:
    lines = [
        "Manifest-Version: {}".format(MANIFEST_VERSION),
        "Built-By: {}".format(BUILDER_IDENTITY),
        "Build-Python: {}".format(platform_version(version)),
    ]
    if multi_release:
        lines.append("Multi-Release: true")
    if main_class:
        lines.append("Main-Class: {}".format(main_class.replace("-", "_")))
    return "".join(line + "\n" for line in lines)


class ManifestGenerator:
    """Writes the generated manifest through the entry copier."""

    def __init__(self, copier: EntryCopier, verbose: bool = False) -> None:
        self.copier = copier
        self.verbose = verbose

    def record(self, main_class: Optional[str], multi_release: bool) -> EntryRecord:
        data = build_manifest(main_class=main_class, multi_release=multi_release).encode("utf-8")
        if self.verbose:
            logger.info("Generating %s:\n%s", MANIFEST_ENTRY, data.decode("utf-8"))
        return EntryRecord(name=MANIFEST_EXCLUSION_NAME, opener=lambda: io.BytesIO(data))

    def write(self, main_class: Optional[str], multi_release: bool) -> CopyResult:
        record = self.record(main_class, multi_release)
        return self.copier.copy(record, target=MANIFEST_ENTRY)
