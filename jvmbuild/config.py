"""Environment configuration for a build."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

BUILD_ARGUMENTS = "BP_BUILD_ARGUMENTS"
BUILT_MODULE = "BP_BUILT_MODULE"
BUILT_ARTIFACT = "BP_BUILT_ARTIFACT"
STACK_ID = "CNB_STACK_ID"


@dataclass
class BuildConfiguration:
    """User overrides and host facts a build depends on.

    An override is set when its variable is present, even if empty.
    """
    home: Path
    build_arguments: Optional[str] = None
    built_module: Optional[str] = None
    built_artifact: Optional[str] = None
    stack_id: str = ""

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "BuildConfiguration":
        """Read configuration from the process environment (and a .env file)."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        home = environ.get("HOME")
        return cls(
            home=Path(home) if home else Path.home(),
            build_arguments=environ.get(BUILD_ARGUMENTS),
            built_module=environ.get(BUILT_MODULE),
            built_artifact=environ.get(BUILT_ARTIFACT),
            stack_id=environ.get(STACK_ID, ""),
        )
