"""Build orchestration: choose the tool invocation and assemble the layers."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import yaml

from ..config import BuildConfiguration, BUILD_ARGUMENTS, BUILT_ARTIFACT, BUILT_MODULE
from ..dependency import BuildpackDependency, DependencyCache, DependencyResolver
from ..errors import ConflictingBuildSystemsError, FilesystemError
from ..layers import Contributor
from ..logger import format_user_config
from ..plan import BuildpackPlan, PlanEntryResolver
from .application import Application
from .cache import Cache
from .interface import BuildSystem

logger = logging.getLogger('jvmbuild')

DESCRIPTOR = "buildpack.yaml"


@dataclass
class Buildpack:
    """The buildpack descriptor: identity and the distributions it can install."""
    path: Path
    info: Dict[str, Any] = field(default_factory=dict)
    dependencies: List[BuildpackDependency] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "Buildpack":
        path = Path(path)
        file = path / DESCRIPTOR
        try:
            with open(file, 'r', encoding='utf-8') as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise FilesystemError("unable to read buildpack descriptor", str(file), e) from e

        try:
            metadata = content.get('metadata') or {}
            return cls(
                path=path,
                info=content.get('buildpack') or {},
                dependencies=[BuildpackDependency.from_dict(d) for d in metadata.get('dependencies', [])],
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise FilesystemError("unable to parse buildpack descriptor", str(file), e) from e

    @property
    def cache_path(self) -> Path:
        """Directory of distributions shipped with the buildpack."""
        return self.path / "dependencies"


@dataclass
class BuildContext:
    application_path: Path
    layers_path: Path
    buildpack: Buildpack
    plan: BuildpackPlan
    configuration: BuildConfiguration
    download_path: Optional[Path] = None


@dataclass
class BuildResult:
    layers: List[Contributor] = field(default_factory=list)
    plan: BuildpackPlan = field(default_factory=BuildpackPlan)


class Build:
    """Selects the participating build system and contributes its layers."""

    def __init__(self, systems: List[BuildSystem]):
        self.systems = systems

    def build(self, context: BuildContext) -> BuildResult:
        """Assemble the layers for one build.

        Raises:
            ConflictingBuildSystemsError: If more than one build system participates
            ResolutionError: If the plan or a distribution cannot be resolved
            FilesystemError: If the wrapper script cannot be inspected
        """
        title = context.buildpack.info.get('name') or "JVM Build System"
        version = context.buildpack.info.get('version')
        logger.info(f"{title} {version}" if version else title)

        result = BuildResult()

        resolver = PlanEntryResolver(context.plan)
        dependency_resolver = DependencyResolver(context.buildpack.dependencies, context.configuration.stack_id)
        dependency_cache = DependencyCache(
            context.buildpack.cache_path,
            context.download_path or context.layers_path / ".downloads"
        )

        participants = [s for s in self.systems if s.participate(resolver)]
        if len(participants) > 1:
            raise ConflictingBuildSystemsError([s.name() for s in participants])

        for system in participants:
            logger.info(format_user_config(BUILD_ARGUMENTS, "the arguments passed to the build system",
                                           " ".join(system.default_arguments())))
            logger.info(format_user_config(BUILT_MODULE, "the module to find application artifact in", "<ROOT>"))
            logger.info(format_user_config(BUILT_ARTIFACT, "the built application artifact", system.default_target()))

            wrapper = Path(context.application_path) / system.wrapper()
            try:
                wrapper.stat()
                command = wrapper.resolve()
                logger.debug(f"Using wrapper {command}")
            except FileNotFoundError:
                command = system.distribution(context.layers_path)
                result.layers.append(system.distribution_layer(dependency_resolver, dependency_cache, result.plan))
                logger.debug(f"No wrapper found, using {system.name()} distribution at {command}")
            except OSError as e:
                raise FilesystemError("unable to stat", str(wrapper), e) from e

            result.layers.append(Cache(system.cache_path()))
            result.layers.append(Application(
                context.application_path,
                str(command),
                system.default_arguments(),
                system.default_target(),
                context.configuration
            ))

        return result
