"""Build system registry."""

from pathlib import Path
from typing import List

from .interface import BuildSystem
from .maven_build import MavenBuildSystem
from .gradle_build import GradleBuildSystem


def default_build_systems(home: Path) -> List[BuildSystem]:
    """Create every supported build system, in detection order.

    Args:
        home: The building user's home directory

    Returns:
        Gradle first, then Maven
    """
    return [GradleBuildSystem(home), MavenBuildSystem(home)]
