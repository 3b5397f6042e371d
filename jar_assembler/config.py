"""Configuration constants, exclusion table, and .env-backed flags.

WHY: Centralizes every fixed value the assembler depends on (excluded
paths, reserved entry names, thresholds, manifest identity) so they are
plain data that is easy to find and change, instead of being buried in
the copy and merge logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level tuples and strings. env_flag() reads a boolean setting
from the environment and rejects anything that is not literally
"true" or "false".

RULES:
- Exclusion patterns are matched against the *complete* entry name
- Real environment variables win over values from .env
- Flag values must be exactly "true" or "false" (case-sensitive)
- A malformed flag raises ConfigurationError, never a silent default
"""

from __future__ import annotations

import os
import re
from typing import Optional

from dotenv import load_dotenv

from jar_assembler.errors import ConfigurationError

# Load .env from the working directory (where the tool is run from)
load_dotenv()

ENV_PREFIX = "JAR_ASSEMBLER_"

# ---------------------------------------------------------------------------
# Excluded entry names (complete-name matches, including any path)
# ---------------------------------------------------------------------------

EXCLUDE_PATTERNS: tuple[str, ...] = (
    r"project\.clj",
    r"LICENSE",
    r"COPYRIGHT",
    r"\.keep",
    r".*\.pom",
    r"module-info\.class",
    r"(?i)META-INF/.*\.(?:MF|SF|RSA|DSA)",
    r"(?i)META-INF/(?:INDEX\.LIST|DEPENDENCIES|NOTICE|LICENSE)(?:\.txt)?",
)
"""Build descriptors, license files, module descriptors, signing metadata
and package index files. Never written to the output archive."""

# ---------------------------------------------------------------------------
# Classpath and archive layout
# ---------------------------------------------------------------------------

ARCHIVE_FILE_RE = re.compile(r"\.jar$")
"""A regular file on the classpath is consumed as a nested archive when
its path matches this pattern."""

VERSIONED_RELEASE_PREFIX = "META-INF/versions/"

MANIFEST_ENTRY = "META-INF/MANIFEST.MF"

MANIFEST_EXCLUSION_NAME = "MANIFEST.MF"
"""Name the generated manifest is checked against the exclusion table
under. Input manifests live at META-INF/MANIFEST.MF and are excluded."""

MANIFEST_VERSION = "1.0"
BUILDER_IDENTITY = "jar-assembler"

# ---------------------------------------------------------------------------
# Log4j2 binary plugin cache
# ---------------------------------------------------------------------------

LOG4J2_PLUGINS_FILE = "META-INF/org/apache/logging/log4j/core/config/plugins/Log4j2Plugins.dat"
"""Binary cache that collects plugin declarations across jars. Copies
are allowed to overwrite each other until one larger than
LOG4J2_PLUGINS_THRESHOLD has been written."""

LOG4J2_PLUGINS_THRESHOLD = 5000
"""Size in bytes. The log4j 1.2 bridge ships a ~3K copy, log4j-core ~20K."""

# ---------------------------------------------------------------------------
# Output archive
# ---------------------------------------------------------------------------

ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
"""Timestamp for entries the sources did not date (manifest, implicit
directories). Earliest value the ZIP format can store."""


def env_flag(setting: str) -> Optional[bool]:
    """Read a boolean setting from the environment.

    WHY: Debug tracing is switched on from the environment (or a .env
    file), not from the command line. A typo such as "True" or "1" must
    not be silently read as false.

    HOW: Looks up JAR_ASSEMBLER_<SETTING> in os.environ (already
    populated from .env by python-dotenv) and maps the two accepted
    spellings to a bool.

    RULES:
    - Missing variable returns None
    - "true" returns True, "false" returns False
    - Anything else raises ConfigurationError

    Args:
        setting: Setting name, e.g. "debug".

    Returns:
        The flag value, or None when the variable is not set.
    """
    variable = ENV_PREFIX + setting.upper()
    level = os.getenv(variable)
    if level is None:
        return None
    if level == "true":
        return True
    if level == "false":
        return False
    raise ConfigurationError(
        "{} should be true or false (got {!r})".format(variable, level),
        variable=variable,
        value=level,
    )
