"""Maven build system implementation."""

from pathlib import Path
from typing import List
import logging

from ..archive import extract_tar_gz
from ..dependency import DependencyLayerContributor
from ..layers import Layer
from .interface import BuildSystem

logger = logging.getLogger('jvmbuild')


class MavenDistribution:
    """Installs a Maven distribution tarball into its layer."""

    name = "maven"

    def __init__(self, layer_contributor: DependencyLayerContributor):
        self.layer_contributor = layer_contributor

    def contribute(self, layer: Layer) -> Layer:
        def expand(artifact) -> Layer:
            logger.info(f"  Expanding to {layer.path}")
            extract_tar_gz(artifact, layer.path, 1)

            layer.build = True
            layer.cache = True
            return layer

        return self.layer_contributor.contribute(layer, expand)


class MavenBuildSystem(BuildSystem):
    """Maven build system implementation."""

    def name(self) -> str:
        return "maven"

    def marker_files(self) -> List[str]:
        return ["pom.xml"]

    def default_arguments(self) -> List[str]:
        return ["-Dmaven.test.skip=true", "package"]

    def default_target(self) -> str:
        return str(Path("target") / "*.[jw]ar")

    def wrapper(self) -> str:
        return "mvnw"

    def distribution(self, layers_path: Path) -> Path:
        return Path(layers_path) / "maven" / "bin" / "mvn"

    def cache_directory(self) -> str:
        return ".m2"

    def distribution_contributor(self, dependency_contributor: DependencyLayerContributor) -> MavenDistribution:
        return MavenDistribution(dependency_contributor)
