"""Layer declaring a build tool's own dependency cache."""

from pathlib import Path
import logging

from ..errors import FilesystemError
from ..layers import Layer

logger = logging.getLogger('jvmbuild')


class Cache:
    """Exposes a tool cache directory (e.g. ~/.m2) as a cached layer.

    The cache path is linked to the layer directory so the tool's downloads
    survive between builds. Its contents are never inspected.
    """

    name = "cache"

    def __init__(self, path: Path):
        self.path = Path(path)

    def contribute(self, layer: Layer) -> Layer:
        try:
            layer.path.mkdir(parents=True, exist_ok=True)

            if self.path.is_symlink() or self.path.exists():
                logger.debug(f"Cache location {self.path} already exists, leaving it in place")
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.symlink_to(layer.path, target_is_directory=True)
                logger.info(f"  Linked {self.path} to {layer.path}")
        except OSError as e:
            raise FilesystemError("unable to link cache", f"{self.path} to {layer.path}", e) from e

        layer.metadata = {"path": str(self.path)}
        layer.cache = True
        return layer
