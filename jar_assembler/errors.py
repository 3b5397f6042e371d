"""Exception taxonomy for the assembler.

Only two failures ever stop a run: a malformed configuration flag
(raised before any archive work) and a setup/teardown failure around
the staging area or the destination. Everything that goes wrong with a
single classpath item or entry is recorded and the run carries on.
"""

from __future__ import annotations

from typing import Optional


class AssemblyError(Exception):
    """Base class for errors raised by jar_assembler."""


class ConfigurationError(AssemblyError, ValueError):
    """A setting has a value the assembler cannot interpret."""

    def __init__(self, message: str, variable: Optional[str] = None, value: Optional[str] = None) -> None:
        super().__init__(message)
        self.variable = variable
        self.value = value


class FatalSetupError(AssemblyError, RuntimeError):
    """The staging area or the destination archive could not be prepared."""
