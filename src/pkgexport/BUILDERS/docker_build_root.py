# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""
Final preparation of a populated build root into a buildable image context.

Two preparation paths exist, chosen once per build root from the target
platform:

* container-init roots get the service's users and groups appended to their
  account databases plus an `/init.sh` entrypoint, then a Dockerfile;
* native-init roots only get a Dockerfile, since the platform's own init
  starts the supervisor.
"""
import logging
import os
import sys
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Optional

from .build_root import BuildRoot
from .docker_image import DockerImage
from .image_builder import ImageBuilder
from .templates import DOCKERFILE, DOCKERFILE_NATIVE, INIT_SH, render
from ..MODELS.package_ident import PackageIdent
from ..NAMING.naming import Naming
from ..UTILS.engine import Engine
from ..UTILS.fs import pkg_path_for, set_permissions, write_file
from ..UTILS.ui import UI, Status
from ..errors import HandleConsumedError

logger = logging.getLogger(__name__)

BUSYBOX_IDENT = PackageIdent.parse("core/busybox-static")
HAB_IDENT = PackageIdent.parse("core/hab")

INIT_SH_MODE = 0o755


class TargetPlatform(str, Enum):
    """
    Platform the image will run on.
    """
    LINUX = "linux"
    WINDOWS = "windows"

    @classmethod
    def host(cls) -> "TargetPlatform":
        return cls.WINDOWS if sys.platform.startswith("win") else cls.LINUX


class ContainerInitPreparation:
    """Roots whose entrypoint script runs as the container's init."""
    dockerfile_template = DOCKERFILE

    def prepare(self, root: "DockerBuildRoot", ui: UI):
        root.add_users_and_groups(ui)
        root.create_entrypoint(ui)


class NativeInitPreparation:
    """Roots that rely on the platform's native init."""
    dockerfile_template = DOCKERFILE_NATIVE

    def prepare(self, root: "DockerBuildRoot", ui: UI):
        pass


PREPARATIONS = {
    TargetPlatform.LINUX: ContainerInitPreparation(),
    TargetPlatform.WINDOWS: NativeInitPreparation(),
}


class DockerBuildRoot:
    """
    A build root that has been completed into a Docker build context.

    Use `from_build_root` to run every preparation step; the constructor
    alone only selects the preparation path.
    """

    def __init__(self, build_root: BuildRoot, platform: Optional[TargetPlatform] = None):
        self._root = build_root
        self.platform = TargetPlatform(platform) if platform else TargetPlatform.host()
        self.preparation = PREPARATIONS[self.platform]
        self._destroyed = False

    @classmethod
    def from_build_root(cls, build_root: BuildRoot, ui: UI,
                        platform: Optional[TargetPlatform] = None) -> "DockerBuildRoot":
        """
        Builds a completed Docker build root, performing the final tasks on
        the root filesystem.

        Raises:
            OSError: If a file in the root cannot be written.
            PackageNotFound: If a package the entrypoint or Dockerfile
                refers to is not installed in the root.
        """
        root = cls(build_root, platform)
        root.preparation.prepare(root, ui)
        root.create_dockerfile(ui)
        return root

    def _ensure_usable(self):
        if self._destroyed:
            raise HandleConsumedError(f"Build root {self._root.workdir()} has already been destroyed")

    def destroy(self, ui: UI):
        """
        Destroys the build root's work directory. The build root cannot be
        used afterwards, even if removal fails.
        """
        self._ensure_usable()
        self._destroyed = True
        self._root.destroy(ui)

    def add_users_and_groups(self, ui: UI):
        """
        Appends the service's users and groups to the root's /etc/passwd and
        /etc/group. Existing records are left as they are.

        Raises:
            FileNotFoundError: If the root has no account database to append to.
        """
        self._ensure_usable()
        ctx = self._root.ctx()
        users, groups = ctx.svc_users_and_groups()
        for kind, name, entries in (("user", "etc/passwd", users), ("group", "etc/group", groups)):
            path = Path(ctx.rootfs) / name
            with open(path, "r+", newline="\n") as f:
                f.seek(0, os.SEEK_END)
                for entry in entries:
                    ui.status(Status.CREATING, f"{kind} '{entry.name}' in /{name}")
                    f.write(f"{entry}\n")
            ui.status(Status.CREATED, f"{len(entries)} {kind} record(s) in /{name}")

    def create_entrypoint(self, ui: UI) -> Path:
        """
        Renders /init.sh into the root and makes it executable.
        """
        self._ensure_usable()
        ui.status(Status.CREATING, "entrypoint script")
        ctx = self._root.ctx()
        busybox_shell = pkg_path_for(BUSYBOX_IDENT, ctx.rootfs) / "bin" / "sh"
        content = render(
            INIT_SH,
            busybox_shell=busybox_shell.as_posix(),
            path=ctx.env_path,
            sup_bin=f"{(PurePosixPath(ctx.bin_path) / 'hab').as_posix()} sup",
            primary_svc_ident=str(ctx.primary_svc_ident),
        )
        init = write_file(Path(ctx.rootfs) / "init.sh", content)
        set_permissions(init, INIT_SH_MODE)
        ui.status(Status.CREATED, f"entrypoint script {init}")
        return init

    def create_dockerfile(self, ui: UI) -> Path:
        """
        Renders the Dockerfile into the work directory.

        Packages are listed dependencies-first, straight from the graph, so
        that rarely changing packages land in the earliest layers.
        """
        self._ensure_usable()
        ui.status(Status.CREATING, "image Dockerfile")
        ctx = self._root.ctx()
        hab_path = (pkg_path_for(HAB_IDENT, ctx.rootfs) / "bin" / "hab").as_posix().replace("\\", "/")
        content = render(
            self.preparation.dockerfile_template,
            base_image=ctx.base_image,
            rootfs=Path(ctx.rootfs).name,
            path=ctx.env_path,
            hab_path=hab_path,
            exposes=" ".join(ctx.exposes),
            multi_layer=ctx.multi_layer,
            primary_svc_ident=str(ctx.primary_svc_ident),
            installed_primary_svc_ident=str(ctx.installed_primary_svc_ident),
            environment=ctx.environment,
            packages=[str(ident) for ident in self._root.graph().reverse_topological_sort()],
        )
        dockerfile = write_file(self._root.workdir() / "Dockerfile", content)
        ui.status(Status.CREATED, f"image Dockerfile {dockerfile}")
        return dockerfile

    def export(self, ui: UI, naming: Naming, memory: Optional[str] = None,
               engine: Optional[Engine] = None) -> DockerImage:
        """
        Builds the image locally, named by the given naming policy.

        Raises:
            NamingError: If the policy cannot name the installed service.
            BuildFailed: If the engine's build fails.
            DockerImageIdNotFound: If the built image's id cannot be resolved.
        """
        self._ensure_usable()
        ui.status(Status.CREATING, "Docker image")
        ctx = self._root.ctx()
        image_name, tags = naming.image_identifiers(ctx.installed_primary_svc_ident, ctx.channel)
        logger.info("Exporting %s as %s", ctx.installed_primary_svc_ident, image_name)

        builder = ImageBuilder(self._root.workdir(), image_name, engine=engine)
        for tag in tags:
            builder = builder.tag(tag)
        if memory:
            builder = builder.memory(memory)
        image = builder.build()
        ui.status(Status.CREATED, f"Docker image '{image_name}' ({image.id})")
        return image
