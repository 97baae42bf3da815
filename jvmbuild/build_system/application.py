"""Compiled application layer: build once per source change, then replace the source."""

import logging
import shlex
import shutil
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

from ..archive import extract_zip
from ..config import BuildConfiguration, BUILD_ARGUMENTS, BUILT_ARTIFACT, BUILT_MODULE
from ..errors import ArgumentParseError, ArtifactNotFoundError, FilesystemError
from ..executor import CommandExecutor
from ..layers import Layer, LayerContributor, copy_file, file_listing
from ..logger import LogWriter, format_user_config

logger = logging.getLogger('jvmbuild')

ARCHIVE_NAME = "application.zip"
MANIFEST = "META-INF/MANIFEST.MF"


def parse_manifest(content: str) -> Dict[str, str]:
    """Parse JAR manifest headers, joining continuation lines."""
    headers: Dict[str, str] = {}
    key = None
    for line in content.splitlines():
        if line.startswith(" ") and key is not None:
            headers[key] += line[1:]
            continue

        key = None
        name, sep, value = line.partition(":")
        if sep and name.strip():
            key = name.strip()
            headers[key] = value.strip()
    return headers


class Application:
    """Builds the application and replaces its source with the built artifact.

    The file listing of the application is captured when the instance is
    created and used as the layer fingerprint, so an unchanged source tree
    reuses the previously captured artifact without running the build.
    """

    name = "application"

    def __init__(
        self,
        application_path: Path,
        command: str,
        default_arguments: List[str],
        default_target: str,
        configuration: BuildConfiguration,
        executor: Optional[CommandExecutor] = None
    ):
        self.application_path = Path(application_path)
        self.command = str(command)
        self.default_arguments = default_arguments
        self.default_target = default_target
        self.configuration = configuration
        self.executor = executor or CommandExecutor()

        expected = {"files": file_listing(self.application_path)}
        self.layer_contributor = LayerContributor("Compiled Application", expected)

    def contribute(self, layer: Layer) -> Layer:
        def build() -> Layer:
            logger.info(format_user_config(BUILD_ARGUMENTS, "the arguments passed to the build system",
                                           " ".join(self.default_arguments)))
            logger.info(format_user_config(BUILT_ARTIFACT, "the built application artifact", self.default_target))
            logger.info(format_user_config(BUILT_MODULE, "the module to find application artifact in", "<ROOT>"))

            arguments = self.resolve_arguments()

            logger.info(f"  Executing {Path(self.command).name} {' '.join(arguments)}")
            sink = LogWriter(logger)
            self.executor.execute(self.command, arguments, self.application_path, sink, sink)

            artifact = self.resolve_artifact()
            copy_file(Path(artifact), layer.path / ARCHIVE_NAME)

            layer.cache = True
            return layer

        layer = self.layer_contributor.contribute(layer, build)

        logger.info("Removing source code")
        self._remove_source()

        file = layer.path / ARCHIVE_NAME
        try:
            with open(file, 'rb') as f:
                extract_zip(f, self.application_path, 0)
        except OSError as e:
            raise FilesystemError("unable to open", str(file), e) from e

        return layer

    def _remove_source(self) -> None:
        try:
            children = list(self.application_path.iterdir())
        except OSError as e:
            raise FilesystemError("unable to list children of", str(self.application_path), e) from e

        for child in children:
            try:
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
            except OSError as e:
                raise FilesystemError("unable to remove", str(child), e) from e

    def resolve_arguments(self) -> List[str]:
        """Get the build arguments, honoring the BP_BUILD_ARGUMENTS override."""
        value = self.configuration.build_arguments
        if value is None:
            return list(self.default_arguments)

        try:
            return shlex.split(value)
        except ValueError as e:
            raise ArgumentParseError("unable to parse arguments from", value, e) from e

    def resolve_artifact(self) -> str:
        """Find the single deployable artifact the build produced.

        Raises:
            ArtifactNotFoundError: If zero or several candidates qualify
            FilesystemError: If a candidate cannot be inspected
        """
        pattern = self.default_target
        if self.configuration.built_module is not None:
            pattern = str(Path(self.configuration.built_module) / pattern)
        if self.configuration.built_artifact is not None:
            pattern = self.configuration.built_artifact

        # Empty or absolute patterns cannot match inside the application
        if not pattern or Path(pattern).is_absolute():
            raise ArtifactNotFoundError(pattern, [])

        candidates = sorted(str(p) for p in self.application_path.glob(pattern))

        if len(candidates) == 1:
            return candidates[0]

        artifacts = [c for c in candidates if self._interesting_file(c)]

        if len(artifacts) != 1:
            raise ArtifactNotFoundError(pattern, candidates)

        return artifacts[0]

    def _interesting_file(self, path: str) -> bool:
        """Check whether an archive is a WAR or an executable JAR."""
        try:
            with zipfile.ZipFile(path) as z:
                for info in z.infolist():
                    if info.filename == "WEB-INF/" and info.is_dir():
                        return True

                    if info.filename == MANIFEST:
                        content = z.read(info).decode('utf-8')
                        if "Main-Class" in parse_manifest(content):
                            return True
        except (OSError, zipfile.BadZipFile, UnicodeDecodeError) as e:
            raise FilesystemError("unable to investigate", path, e) from e

        return False
