"""Archive expansion with leading path component stripping."""

import logging
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional

from .errors import FilesystemError

logger = logging.getLogger('jvmbuild')


def _target_path(destination: Path, name: str, strip_components: int) -> Optional[Path]:
    """Map an archive member name onto destination, or None if fully stripped."""
    parts = [p for p in PurePosixPath(name).parts if p not in ("", ".", "/")]
    parts = parts[strip_components:]
    if not parts:
        return None

    target = destination.joinpath(*parts)
    resolved_destination = destination.resolve()
    resolved_target = target.resolve()
    if resolved_target != resolved_destination and resolved_destination not in resolved_target.parents:
        raise FilesystemError("illegal archive entry outside of destination", name)
    return target


def extract_zip(reader: BinaryIO, destination: Path, strip_components: int = 0) -> None:
    """Expand a zip stream into destination.

    Unix permission bits stored in the archive are restored so that launcher
    scripts remain executable.
    """
    destination = Path(destination)
    try:
        destination.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(reader) as z:
            for info in z.infolist():
                target = _target_path(destination, info.filename, strip_components)
                if target is None:
                    continue

                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)
                with z.open(info) as source, open(target, 'wb') as out:
                    shutil.copyfileobj(source, out)

                mode = (info.external_attr >> 16) & 0o777
                if mode:
                    target.chmod(mode)
    except (OSError, zipfile.BadZipFile) as e:
        raise FilesystemError("unable to expand zip into", str(destination), e) from e


def extract_tar_gz(reader: BinaryIO, destination: Path, strip_components: int = 0) -> None:
    """Expand a gzip compressed tar stream into destination."""
    destination = Path(destination)
    try:
        destination.mkdir(parents=True, exist_ok=True)
        with tarfile.open(fileobj=reader, mode='r:gz') as t:
            for member in t:
                target = _target_path(destination, member.name, strip_components)
                if target is None:
                    continue

                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                elif member.issym():
                    target.parent.mkdir(parents=True, exist_ok=True)
                    if target.is_symlink() or target.exists():
                        target.unlink()
                    target.symlink_to(member.linkname)
                elif member.isfile():
                    target.parent.mkdir(parents=True, exist_ok=True)
                    source = t.extractfile(member)
                    with source, open(target, 'wb') as out:
                        shutil.copyfileobj(source, out)
                    target.chmod(stat.S_IMODE(member.mode) or 0o644)
                else:
                    logger.debug(f"Skipping unsupported tar entry: {member.name}")
    except (OSError, tarfile.TarError) as e:
        raise FilesystemError("unable to expand tar.gz into", str(destination), e) from e
