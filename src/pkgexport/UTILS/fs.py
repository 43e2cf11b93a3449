"""
Filesystem helpers shared by the artifact writers.
"""
import os
from pathlib import Path, PurePosixPath
from typing import Union

from ..MODELS.package_ident import PackageIdent, version_sort_key
from ..errors import PackageNotFound

PKG_ROOT = PurePosixPath("/hab/pkgs")


def write_file(path: Union[str, Path], content: str) -> Path:
    """
    Truncate-and-write a text file, creating parent directories first.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="\n") as f:
        f.write(content)
    return path


def set_permissions(path: Union[str, Path], mode: int):
    """Set POSIX permission bits explicitly, ignoring the process umask."""
    os.chmod(path, mode)


def _newest(directory: Path, key=None) -> str:
    entries = [p.name for p in directory.iterdir() if p.is_dir()]
    if not entries:
        raise FileNotFoundError(directory)
    return max(entries, key=key)


def pkg_path_for(ident: PackageIdent, rootfs: Union[str, Path]) -> PurePosixPath:
    """
    Locate an installed package inside a root filesystem.

    Partially qualified identifiers resolve to the newest installed
    version and release.

    Args:
        ident: Package to look up.
        rootfs: Host path of the root filesystem.

    Returns:
        The package's absolute path as seen from inside the image.
    """
    rootfs = Path(rootfs)
    base = rootfs.joinpath(*PKG_ROOT.parts[1:], ident.origin, ident.name)
    try:
        version = ident.version or _newest(base, key=version_sort_key)
        release = ident.release or _newest(base / version)
    except FileNotFoundError:
        raise PackageNotFound(str(ident), str(rootfs))

    if not (base / version / release).is_dir():
        raise PackageNotFound(str(ident), str(rootfs))
    return PKG_ROOT / ident.origin / ident.name / version / release
