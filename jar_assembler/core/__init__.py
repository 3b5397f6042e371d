"""Core assembly engine.

WHY: The core package holds the part of the tool that must behave the
same no matter who calls it: classification of classpath items, the
per-entry copy decision, staging and publication of the archive.

HOW: model.py defines the data structures, exclusions.py the excluded
names, staging.py the writable archive, copier.py the per-entry
decision, classpath.py the walk over classpath items, manifest.py the
generated manifest, and assembly.py ties them into one run.

RULES:
- Nothing here parses command-line arguments or configures logging
- All per-run mutable state lives on RunState
"""
