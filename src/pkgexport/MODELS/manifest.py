"""
YAML manifest describing an already-populated build root.
"""
from pathlib import Path
from typing import List, Dict, Optional, Any, Union
import yaml
from pydantic import BaseModel, ValidationError

from .build_context import EtcPasswdEntry, EtcGroupEntry
from ..errors import ManifestError


class PackageEntry(BaseModel):
    """
    One installed package and its direct dependencies.
    """
    ident: str
    deps: List[str] = []


class BuildManifest(BaseModel):
    """
    The on-disk form of a build root, as written by whatever staged it.

    Example:

        workdir: build
        rootfs: rootfs
        base_image: scratch
        env_path: /hab/bin:/bin
        primary_svc_ident: core/redis
        packages:
          - ident: core/glibc/2.27/20190115002733
          - ident: core/redis/4.0.14/20190319155852
            deps: [core/glibc/2.27/20190115002733]
    """
    workdir: Path
    rootfs: str = "rootfs"
    base_image: str = "scratch"
    env_path: str
    exposes: List[Union[int, str]] = []
    multi_layer: bool = False
    primary_svc_ident: str
    installed_primary_svc_ident: Optional[str] = None
    channel: str = "stable"
    environment: Dict[str, Any] = {}
    users: List[EtcPasswdEntry] = []
    groups: List[EtcGroupEntry] = []
    bin_path: str = "/hab/bin"
    packages: List[PackageEntry] = []
    naming: Dict[str, Any] = {}

    @classmethod
    def load(cls, path) -> "BuildManifest":
        """
        Parse a manifest file. A relative `workdir` is resolved against the
        manifest's own directory.

        :raises ManifestError: If the file is unreadable or invalid.
        """
        path = Path(path)
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ManifestError(f"Cannot read manifest {path}: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError(f"Manifest {path} must be a mapping")

        try:
            manifest = cls(**data)
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest {path}: {e}") from e

        if not manifest.workdir.is_absolute():
            manifest.workdir = (path.parent / manifest.workdir).resolve()
        return manifest
