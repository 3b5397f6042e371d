"""Pydantic model for the options of one assembly run.

WHY: The engine is driven by a CLI today but can be called from build
scripts too. A single validated options object means bad input (an
unknown mode, a missing destination) is rejected before any staging
area is created, whoever the caller is.

HOW: AssemblyOptions is a pydantic BaseModel. AssemblyMode is a str
enum so values round-trip through the CLI and JSON unchanged.

RULES:
- destination is required and non-empty
- classpath items keep their order; empty strings are dropped
- mode defaults to "uber"
- Python 3.9+ compatible (use Optional/List from typing in the model)
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class AssemblyMode(str, Enum):
    """What the output archive contains.

    RULES:
    - uber: directories and every nested archive
    - thin: directories only (plus the manifest)
    """

    uber = "uber"
    thin = "thin"


class AssemblyOptions(BaseModel):
    """Inputs of one assembly run."""

    classpath: List[str] = Field(
        default_factory=list,
        description="Classpath items (directories and jars) in precedence order.",
    )
    destination: str = Field(
        ...,
        min_length=1,
        description="Path of the archive to create (replaced if it exists).",
    )
    mode: AssemblyMode = Field(
        default=AssemblyMode.uber,
        description="uber includes nested archives, thin only directories.",
    )
    main_class: Optional[str] = Field(
        default=None,
        description="Main-Class written to the manifest, '-' translated to '_'.",
    )
    suppress_clash: bool = Field(
        default=False,
        description="Do not log a warning for each clashing entry.",
    )
    verbose: bool = Field(
        default=False,
        description="Log every source and copied file.",
    )

    @field_validator("classpath")
    @classmethod
    def _drop_empty_items(cls, value: List[str]) -> List[str]:
        return [item for item in value if item]
