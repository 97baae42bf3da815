"""Build tool distributions: resolution, download cache and layer contribution."""

import fnmatch
import hashlib
import logging
import re
import shutil
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional

import httpx
import yaml
from tqdm import tqdm

from .errors import FilesystemError, ResolutionError
from .layers import Layer, LayerContributor
from .plan import BuildpackPlan, BuildpackPlanEntry

logger = logging.getLogger('jvmbuild')


@dataclass
class BuildpackDependency:
    """A downloadable artifact declared in the buildpack descriptor."""
    id: str
    version: str
    uri: str
    sha256: str
    name: str = ""
    stacks: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildpackDependency":
        return cls(
            id=data['id'],
            version=str(data['version']),
            uri=data['uri'],
            sha256=data['sha256'],
            name=data.get('name', ''),
            stacks=list(data.get('stacks', [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _version_key(version: str):
    return [int(p) if p.isdigit() else p for p in re.split(r'[.\-+]', version)]


class DependencyResolver:
    """Selects dependencies by id, version pattern and stack."""

    def __init__(self, dependencies: List[BuildpackDependency], stack_id: str = ""):
        self.dependencies = dependencies
        self.stack_id = stack_id

    def resolve(self, id: str, version: Optional[str] = None) -> BuildpackDependency:
        """Find the newest dependency matching id and version.

        Args:
            id: Dependency id (e.g. 'gradle')
            version: An fnmatch version pattern; None, '' or '*' match any

        Raises:
            ResolutionError: If no dependency matches
        """
        pattern = version or '*'
        candidates = [
            d for d in self.dependencies
            if d.id == id
            and fnmatch.fnmatchcase(d.version, pattern)
            and (not self.stack_id or not d.stacks or self.stack_id in d.stacks or '*' in d.stacks)
        ]

        if not candidates:
            available = [f"{d.id}@{d.version}" for d in self.dependencies]
            raise ResolutionError(
                "no valid dependencies for",
                f"{id}, {pattern}, and {self.stack_id} in {available}"
            )

        candidates.sort(key=lambda d: _version_key(d.version), reverse=True)
        return candidates[0]


class DependencyCache:
    """Locates dependency artifacts, downloading those not already present.

    Args:
        cache_path: Directory of artifacts shipped with the buildpack,
            laid out as <sha256>/<file name>
        download_path: Writable directory for downloaded artifacts
    """

    def __init__(self, cache_path: Path, download_path: Path, timeout: float = 60.0):
        self.cache_path = Path(cache_path)
        self.download_path = Path(download_path)
        self.timeout = timeout

    def artifact(self, dependency: BuildpackDependency) -> Path:
        file_name = Path(httpx.URL(dependency.uri).path).name or dependency.id

        for root in (self.cache_path, self.download_path):
            candidate = root / dependency.sha256 / file_name
            if candidate.is_file():
                logger.info(f"  Reusing cached download from {root}")
                return candidate

        destination = self.download_path / dependency.sha256 / file_name
        self._download(dependency, destination)
        return destination

    def _download(self, dependency: BuildpackDependency, destination: Path) -> None:
        logger.info(f"  Downloading from {dependency.uri}")
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_name(destination.name + ".part")
        digest = hashlib.sha256()

        try:
            with httpx.stream("GET", dependency.uri, follow_redirects=True, timeout=self.timeout) as response:
                response.raise_for_status()
                total = int(response.headers.get("Content-Length", 0)) or None
                with open(partial, 'wb') as out, tqdm(
                        total=total, unit='B', unit_scale=True,
                        desc=dependency.name or dependency.id, ascii=True) as progress:
                    for chunk in response.iter_bytes():
                        out.write(chunk)
                        digest.update(chunk)
                        progress.update(len(chunk))
        except httpx.HTTPError as e:
            partial.unlink(missing_ok=True)
            raise ResolutionError("unable to download", dependency.uri, e) from e
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise FilesystemError("unable to write", str(partial), e) from e

        if digest.hexdigest() != dependency.sha256:
            partial.unlink(missing_ok=True)
            raise ResolutionError(
                "sha256 mismatch for",
                dependency.uri,
                ValueError(f"expected {dependency.sha256}, got {digest.hexdigest()}")
            )

        try:
            shutil.move(str(partial), str(destination))
            with open(destination.parent.with_suffix(".yaml"), 'w', encoding='utf-8') as f:
                yaml.safe_dump(dependency.to_dict(), f, sort_keys=False)
        except OSError as e:
            raise FilesystemError("unable to store download", str(destination), e) from e

        logger.info("  Verified download")


class DependencyLayerContributor:
    """Contributes a dependency artifact to a layer, fingerprinted on the dependency."""

    def __init__(self, dependency: BuildpackDependency, cache: DependencyCache, plan: BuildpackPlan):
        self.dependency = dependency
        self.cache = cache
        self.layer_contributor = LayerContributor(
            f"{dependency.name or dependency.id} {dependency.version}",
            dependency.to_dict()
        )
        plan.entries.append(BuildpackPlanEntry(
            name=dependency.id,
            metadata={'name': dependency.name, 'uri': dependency.uri, 'version': dependency.version},
        ))

    def contribute(self, layer: Layer, fn: Callable[[BinaryIO], Layer]) -> Layer:
        def contribute_artifact() -> Layer:
            artifact = self.cache.artifact(self.dependency)
            try:
                with open(artifact, 'rb') as f:
                    return fn(f)
            except OSError as e:
                raise FilesystemError("unable to open", str(artifact), e) from e

        return self.layer_contributor.contribute(layer, contribute_artifact)
