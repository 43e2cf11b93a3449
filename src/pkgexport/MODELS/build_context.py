"""
Models describing a prepared build root and the accounts the image needs.
"""
from pathlib import Path
from typing import List, Dict, Tuple
from pydantic import BaseModel, ConfigDict, field_validator

from .package_ident import PackageIdent


class EtcPasswdEntry(BaseModel):
    """
    A user record appended to the image's /etc/passwd.
    """
    name: str
    uid: int
    gid: int
    gecos: str = ""
    home: str = "/"
    shell: str = "/bin/sh"

    def __str__(self) -> str:
        return f"{self.name}:x:{self.uid}:{self.gid}:{self.gecos}:{self.home}:{self.shell}"


class EtcGroupEntry(BaseModel):
    """
    A group record appended to the image's /etc/group.
    """
    name: str
    gid: int
    users: List[str] = []

    def __str__(self) -> str:
        return f"{self.name}:x:{self.gid}:{','.join(self.users)}"


class Credentials(BaseModel):
    """
    Registry credentials. The token is passed to the engine as-is.
    """
    token: str


class BuildContext(BaseModel):
    """
    Everything known about a populated root filesystem before it becomes an image.
    Owned by whoever staged the root; read-only to the exporter.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    rootfs: Path
    base_image: str
    env_path: str
    exposes: List[str] = []
    multi_layer: bool = False

    primary_svc_ident: PackageIdent
    installed_primary_svc_ident: PackageIdent
    channel: str = "stable"

    environment: Dict[str, str] = {}
    users: List[EtcPasswdEntry] = []
    groups: List[EtcGroupEntry] = []

    # Directory holding the supervisor binary inside the image
    bin_path: str = "/hab/bin"

    @field_validator("primary_svc_ident", "installed_primary_svc_ident", mode="before")
    @classmethod
    def _parse_ident(cls, value):
        if isinstance(value, str):
            return PackageIdent.parse(value)
        return value

    @field_validator("exposes", mode="before")
    @classmethod
    def _stringify_ports(cls, value):
        return [str(port) for port in value or []]

    @field_validator("environment", mode="before")
    @classmethod
    def _stringify_environment(cls, value):
        environment = {str(k): str(v) for k, v in (value or {}).items()}
        for key, val in environment.items():
            if any(c in key + val for c in "\r\n"):
                raise ValueError(f"Environment variable {key!r} must not contain line breaks")
        return environment

    def svc_users_and_groups(self) -> Tuple[List[EtcPasswdEntry], List[EtcGroupEntry]]:
        """Users and groups the service needs inside the image, in declared order."""
        return list(self.users), list(self.groups)
