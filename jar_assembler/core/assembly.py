"""Orchestration of one assembly run and publication of its archive.

WHY: The copier, the walker and the manifest generator each handle one
concern. Something has to own the per-run state, set up and tear down
the staging area, call them in the right order and decide whether the
run succeeded.

HOW: AssemblyRun resolves the debug flag (failing fast on a malformed
value), creates a fresh RunState and staging archive, walks the
classpath, writes the manifest, packs the staging archive and moves it
over the destination. The staging directory is removed whatever
happens.

RULES:
- ConfigurationError is raised before any file work
- FatalSetupError aborts the run (staging, packing, publication)
- Per-entry errors never abort; they are counted in RunState
- A run with errors still publishes its (partial) archive
- Each AssemblyRun owns its state; run() may be called more than once
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from jar_assembler.config import env_flag
from jar_assembler.core.classpath import ClasspathWalker
from jar_assembler.core.copier import EntryCopier
from jar_assembler.core.exclusions import ExclusionRuleSet
from jar_assembler.core.manifest import ManifestGenerator
from jar_assembler.core.model import AssemblyResult, RunState
from jar_assembler.core.staging import StagingArchive, publish
from jar_assembler.options import AssemblyMode, AssemblyOptions
from jar_assembler.strategies import ClashResolver

logger = logging.getLogger(__name__)


class AssemblyRun:
    """One invocation of the assembler."""

    def __init__(self, options: AssemblyOptions, exclusions: Optional[ExclusionRuleSet] = None) -> None:
        self.options = options
        self.exclusions = exclusions or ExclusionRuleSet()
        self.state = RunState()

    def run(self) -> AssemblyResult:
        options = self.options
        debug = bool(env_flag("debug"))
        self.state = RunState()
        destination = Path(options.destination)

        staging = StagingArchive.create()
        try:
            if options.verbose:
                logger.info("Building %sjar: %s", options.mode.value, options.destination)

            resolver = ClashResolver(suppress_warnings=options.suppress_clash, debug=debug)
            copier = EntryCopier(staging, self.state, self.exclusions, resolver, debug=debug)
            walker = ClasspathWalker(
                copier,
                self.state,
                exclusions=self.exclusions,
                thin=options.mode is AssemblyMode.thin,
                verbose=options.verbose,
                debug=debug,
            )
            walker.walk(options.classpath)

            manifest = ManifestGenerator(copier, verbose=options.verbose)
            if manifest.write(options.main_class, self.state.multi_release_detected).failed:
                self.state.record_error()

            packed, entry_count = staging.pack(destination.name)
            publish(packed, destination)
        finally:
            staging.discard()

        return AssemblyResult(
            destination=destination,
            error_count=self.state.error_count,
            multi_release=self.state.multi_release_detected,
            entry_count=entry_count,
            warnings=list(walker.warnings),
        )


def assemble(options: AssemblyOptions) -> AssemblyResult:
    """Run one assembly with a fresh AssemblyRun."""
    return AssemblyRun(options).run()
