"""Layers: named, persisted directories contributed during a build."""

import hashlib
import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Protocol, Union

import yaml

from .errors import FilesystemError

logger = logging.getLogger('jvmbuild')


@dataclass
class Layer:
    """A layer directory with its visibility flags and metadata."""
    name: str
    path: Path
    metadata_file: Path
    build: bool = False
    launch: bool = False
    cache: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def reset(self) -> None:
        """Remove any previous contents and flags, leaving an empty directory."""
        try:
            if self.path.is_symlink() or self.path.is_file():
                self.path.unlink()
            elif self.path.exists():
                shutil.rmtree(self.path)
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError("unable to reset layer", str(self.path), e) from e

        self.build = self.launch = self.cache = False
        self.metadata = {}

    def persist(self) -> None:
        """Write flags and metadata next to the layer directory."""
        content = {
            'types': {'build': self.build, 'launch': self.launch, 'cache': self.cache},
            'metadata': self.metadata,
        }
        try:
            with open(self.metadata_file, 'w', encoding='utf-8') as f:
                yaml.safe_dump(content, f, sort_keys=False)
        except OSError as e:
            raise FilesystemError("unable to write layer metadata", str(self.metadata_file), e) from e


class Layers:
    """The root directory holding every layer of a build."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def layer(self, name: str) -> Layer:
        """Get a layer, restoring any persisted flags and metadata."""
        layer = Layer(name=name, path=self.path / name, metadata_file=self.path / f"{name}.yaml")

        if not layer.metadata_file.exists():
            return layer

        try:
            with open(layer.metadata_file, 'r', encoding='utf-8') as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise FilesystemError("unable to read layer metadata", str(layer.metadata_file), e) from e

        types = content.get('types') or {}
        layer.build = bool(types.get('build', False))
        layer.launch = bool(types.get('launch', False))
        layer.cache = bool(types.get('cache', False))
        layer.metadata = content.get('metadata') or {}
        return layer


class Contributor(Protocol):
    name: str

    def contribute(self, layer: Layer) -> Layer: ...


class LayerContributor:
    """Fingerprint-guarded layer contribution.

    The contribution function only runs when the layer's persisted metadata
    differs from the expected metadata.
    """

    def __init__(self, name: str, expected_metadata: Dict[str, Any]):
        self.name = name
        self.expected_metadata = expected_metadata

    def contribute(self, layer: Layer, fn: Callable[[], Layer]) -> Layer:
        if layer.metadata == self.expected_metadata:
            logger.info(f"{self.name}: Reusing cached layer")
            return layer

        logger.info(f"{self.name}: Contributing to layer")
        layer.reset()
        layer = fn()
        layer.metadata = self.expected_metadata
        return layer


def file_listing(root: Path) -> List[Dict[str, Any]]:
    """List every entry under root in sorted order.

    Each entry records the relative path, mode and size, plus a sha256
    digest for regular files.
    """
    root = Path(root)
    entries = []
    try:
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for name in sorted(dirnames + filenames):
                path = Path(dirpath) / name
                info = path.lstat()
                entry = {
                    'path': path.relative_to(root).as_posix(),
                    'mode': stat.filemode(info.st_mode),
                    'size': info.st_size,
                }
                if stat.S_ISREG(info.st_mode):
                    entry['sha256'] = _sha256(path)
                entries.append(entry)
    except OSError as e:
        raise FilesystemError("unable to create file listing for", str(root), e) from e

    entries.sort(key=lambda e: e['path'])
    return entries


def _sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(65536), b''):
            digest.update(chunk)
    return digest.hexdigest()


def copy_file(source: Union[BinaryIO, Path], destination: Path) -> None:
    """Copy a file or open binary stream to destination, replacing it."""
    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with open(destination, 'wb') as out:
            if isinstance(source, (str, Path)):
                with open(source, 'rb') as f:
                    shutil.copyfileobj(f, out)
            else:
                shutil.copyfileobj(source, out)
    except OSError as e:
        raise FilesystemError("unable to copy to", str(destination), e) from e


def contribute_layers(layers_path: Path, contributors: List[Contributor]) -> List[Layer]:
    """Run each contributor against its named layer and persist the result."""
    layers = Layers(layers_path)
    contributed = []
    for contributor in contributors:
        layer = layers.layer(contributor.name)
        layer = contributor.contribute(layer)
        layer.persist()
        contributed.append(layer)
    return contributed
