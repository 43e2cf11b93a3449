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
Errors raised while preparing, building, publishing and removing images.

Every error is terminal to the operation in progress. Nothing in this package
catches and retries them; they propagate to the caller unchanged.
"""
from typing import Optional


class ExportError(Exception):
    """Base class for all export failures."""


class BuildFailed(ExportError):
    """The engine's build step exited with a non-zero status."""

    def __init__(self, exit_status: int):
        self.exit_status = exit_status
        super().__init__(f"Docker build failed with exit code: {exit_status}")


class DockerImageIdNotFound(ExportError):
    """No image id was reported for a freshly built image address."""

    def __init__(self, image_tag: str):
        self.image_tag = image_tag
        super().__init__(f"Could not determine Docker image ID for image: {image_tag}")


class PushImageFailed(ExportError):
    """Pushing one of the image's identifiers exited with a non-zero status."""

    def __init__(self, exit_status: int):
        self.exit_status = exit_status
        super().__init__(f"Docker image push failed with exit code: {exit_status}")


class RemoveImageFailed(ExportError):
    """Removing one of the image's identifiers exited with a non-zero status."""

    def __init__(self, exit_status: int):
        self.exit_status = exit_status
        super().__init__(f"Removing local Docker image failed with exit code: {exit_status}")


class InvalidPackageIdent(ExportError):
    """A package identifier string could not be parsed."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid package identifier: {text!r}")


class PackageNotFound(ExportError):
    """A package is not installed inside the root filesystem."""

    def __init__(self, ident: str, rootfs: Optional[str] = None):
        self.ident = ident
        self.rootfs = rootfs
        where = f" in {rootfs}" if rootfs else ""
        super().__init__(f"Package not installed{where}: {ident}")


class NamingError(ExportError):
    """An image name or tag could not be derived from a package identifier."""


class DependencyCycleError(ExportError):
    """The package graph contains a dependency cycle."""


class ManifestError(ExportError):
    """A build manifest is missing or malformed."""


class HandleConsumedError(RuntimeError):
    """
    An image handle or build root was used after it was removed or destroyed.

    This signals a programming error in the caller, not a runtime condition
    to recover from.
    """
