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
Builder that turns a prepared build root into a local container image.
"""
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Tuple

from .identifiers import Identified
from .docker_image import DockerImage
from ..UTILS.engine import Engine
from ..errors import BuildFailed, DockerImageIdNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildRequest:
    """
    Everything the engine's build step needs, accumulated before building.
    """
    workdir: Path
    name: str
    tags: Tuple[str, ...] = ()
    memory: Optional[str] = None


class ImageBuilder(Identified):
    """
    Accumulates a name, tags and an optional memory limit, then builds the
    image in `workdir` through the engine.

    `tag` and `memory` return a new builder and leave this one untouched.
    """

    def __init__(self, workdir, name: str, engine: Optional[Engine] = None,
                 request: Optional[BuildRequest] = None):
        """
        Args:
            workdir: Build context directory containing the Dockerfile.
            name: Base name for the image.
            engine: Engine to invoke. Defaults to the configured docker command.
        """
        self.request = request or BuildRequest(workdir=Path(workdir), name=name)
        self.engine = engine

    @property
    def name(self) -> str:
        return self.request.name

    @property
    def tags(self) -> List[str]:
        return list(self.request.tags)

    def tag(self, tag: str) -> "ImageBuilder":
        """Adds a tag for the image."""
        return ImageBuilder(self.request.workdir, self.request.name, self.engine,
                            replace(self.request, tags=self.request.tags + (tag,)))

    def memory(self, memory: str) -> "ImageBuilder":
        """Sets the memory limit passed to the build, e.g. '2g'."""
        return ImageBuilder(self.request.workdir, self.request.name, self.engine,
                            replace(self.request, memory=memory))

    def build(self) -> DockerImage:
        """
        Builds the image locally and returns a handle to it.

        Raises:
            BuildFailed: If the engine's build exits non-zero.
            DockerImageIdNotFound: If the built image's id cannot be resolved.
        """
        engine = self.engine or Engine()
        args = ["build", "--force-rm"]
        if self.request.memory:
            args += ["--memory", self.request.memory]
        for identifier in self.expanded_identifiers():
            args += ["--tag", identifier]
        args.append(".")

        exit_status = engine.run(args, cwd=str(self.request.workdir))
        if exit_status != 0:
            raise BuildFailed(exit_status)

        if self.request.tags:
            image_tag = f"{self.request.name}:{self.request.tags[0]}"
        else:
            image_tag = self.request.name
        image_id = self._image_id(engine, image_tag)
        logger.info("Built image %s (%s)", image_tag, image_id)

        return DockerImage(
            id=image_id,
            name=self.request.name,
            tags=list(self.request.tags),
            workdir=self.request.workdir,
            engine=engine,
        )

    @staticmethod
    def _image_id(engine: Engine, image_tag: str) -> str:
        output = engine.output(["images", "-q", image_tag])
        lines = output.splitlines()
        if not lines or not lines[0].strip():
            raise DockerImageIdNotFound(image_tag)
        return lines[0].strip()
