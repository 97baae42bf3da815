"""Abstract interface for build systems."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List
import logging

from ..dependency import DependencyCache, DependencyLayerContributor, DependencyResolver
from ..errors import DetectionError, ResolutionError
from ..layers import Contributor
from ..plan import BuildPlan, BuildpackPlan, DetectResult, PlanEntryResolver

logger = logging.getLogger('jvmbuild')


class BuildSystem(ABC):
    """Abstract interface for JVM build systems."""

    def __init__(self, home: Path):
        """Initialize the build system.

        Args:
            home: The building user's home directory
        """
        self.home = Path(home)

    @abstractmethod
    def name(self) -> str:
        """Get the plan name of this build system (e.g., 'maven', 'gradle')."""
        pass

    @abstractmethod
    def marker_files(self) -> List[str]:
        """Get the files whose presence identifies a project of this type."""
        pass

    @abstractmethod
    def default_arguments(self) -> List[str]:
        """Get the arguments passed to the build tool when not overridden."""
        pass

    @abstractmethod
    def default_target(self) -> str:
        """Get the glob, relative to the application, matching built artifacts."""
        pass

    @abstractmethod
    def wrapper(self) -> str:
        """Get the path of the project's wrapper script, relative to the application."""
        pass

    @abstractmethod
    def distribution(self, layers_path: Path) -> Path:
        """Get the build tool executable inside an expanded distribution layer."""
        pass

    @abstractmethod
    def cache_directory(self) -> str:
        """Get the name of the tool's cache directory under the home directory."""
        pass

    @abstractmethod
    def distribution_contributor(self, dependency_contributor) -> Contributor:
        """Wrap a dependency contributor with this tool's expansion logic."""
        pass

    def detect(self, application_path: Path) -> DetectResult:
        """Check the application for this build system's marker files.

        Raises:
            DetectionError: If a marker file cannot be inspected
        """
        result = DetectResult()

        for marker in self.marker_files():
            file = Path(application_path) / marker
            try:
                file.stat()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise DetectionError("unable to determine if", f"{file} exists", e) from e

            name = self.name()
            result.passed = True
            result.plans.append(BuildPlan(provides=[name, "jvm-application"], requires=[name, "jdk"]))
            break

        return result

    def participate(self, resolver: PlanEntryResolver) -> bool:
        """Check whether the resolved plan selected this build system."""
        try:
            _, found = resolver.resolve(self.name())
        except ResolutionError as e:
            raise ResolutionError("unable to resolve plan entry", self.name(), e) from e
        return found

    def distribution_layer(self, resolver: DependencyResolver, cache: DependencyCache,
                           plan: BuildpackPlan) -> Contributor:
        """Create the contributor that installs the build tool distribution.

        Raises:
            ResolutionError: If no distribution is available for this build system
        """
        try:
            dependency = resolver.resolve(self.name())
        except ResolutionError as e:
            raise ResolutionError("unable to find dependency", self.name(), e) from e

        return self.distribution_contributor(DependencyLayerContributor(dependency, cache, plan))

    def cache_path(self) -> Path:
        """Get the tool's own dependency cache under the home directory."""
        return self.home / self.cache_directory()
