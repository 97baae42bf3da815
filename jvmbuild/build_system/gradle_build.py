"""Gradle build system implementation."""

from pathlib import Path
from typing import List
import logging

from ..archive import extract_zip
from ..dependency import DependencyLayerContributor
from ..layers import Layer
from .interface import BuildSystem

logger = logging.getLogger('jvmbuild')


class GradleDistribution:
    """Installs a Gradle distribution zip into its layer."""

    name = "gradle"

    def __init__(self, layer_contributor: DependencyLayerContributor):
        self.layer_contributor = layer_contributor

    def contribute(self, layer: Layer) -> Layer:
        def expand(artifact) -> Layer:
            logger.info(f"  Expanding to {layer.path}")
            extract_zip(artifact, layer.path, 1)

            layer.build = True
            layer.cache = True
            return layer

        return self.layer_contributor.contribute(layer, expand)


class GradleBuildSystem(BuildSystem):
    """Gradle build system implementation."""

    def name(self) -> str:
        return "gradle"

    def marker_files(self) -> List[str]:
        return ["build.gradle", "build.gradle.kts"]

    def default_arguments(self) -> List[str]:
        return ["--no-daemon", "-x", "test", "build"]

    def default_target(self) -> str:
        return str(Path("build") / "libs" / "*.[jw]ar")

    def wrapper(self) -> str:
        return "gradlew"

    def distribution(self, layers_path: Path) -> Path:
        return Path(layers_path) / "gradle" / "bin" / "gradle"

    def cache_directory(self) -> str:
        return ".gradle"

    def distribution_contributor(self, dependency_contributor: DependencyLayerContributor) -> GradleDistribution:
        return GradleDistribution(dependency_contributor)
