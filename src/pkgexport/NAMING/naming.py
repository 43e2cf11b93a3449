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
Naming policy deriving an image name and tags from an installed package.
"""
from typing import List, Optional, Tuple
from jinja2 import Environment, StrictUndefined, TemplateError
from pydantic import BaseModel

from ..MODELS.package_ident import PackageIdent
from ..errors import NamingError

DEFAULT_IMAGE_NAME = "{{ pkg_origin }}/{{ pkg_name }}"

_env = Environment(undefined=StrictUndefined)


class Naming(BaseModel):
    """
    How images are named and tagged.

    `custom_image_name` and `custom_tag` are templates that may use
    `pkg_origin`, `pkg_name`, `pkg_version`, `pkg_release` and `channel`.
    Tags are produced in the order version-release, version, latest, custom.
    """
    custom_image_name: str = DEFAULT_IMAGE_NAME
    latest_tag: bool = True
    version_tag: bool = True
    version_release_tag: bool = True
    custom_tag: Optional[str] = None
    registry_url: Optional[str] = None

    def image_identifiers(self, ident: PackageIdent, channel: str) -> Tuple[str, List[str]]:
        """
        Returns the image name and its possibly empty tags for a package.

        :param ident: Fully qualified installed package identifier.
        :param channel: Release channel the package was installed from.
        :raises NamingError: If the name is empty or a requested tag cannot be derived.
        """
        variables = {
            "pkg_origin": ident.origin,
            "pkg_name": ident.name,
            "pkg_version": ident.version or "",
            "pkg_release": ident.release or "",
            "channel": channel,
        }

        name = self._render(self.custom_image_name, variables).lower()
        if not name:
            raise NamingError(f"Image name template {self.custom_image_name!r} rendered an empty name")
        if self.registry_url:
            registry = self.registry_url.split("://", 1)[-1].rstrip("/")
            name = f"{registry}/{name}"

        tags = []
        if self.version_release_tag:
            if not ident.fully_qualified:
                raise NamingError(f"Cannot tag with version and release, {ident} is not fully qualified")
            tags.append(f"{ident.version}-{ident.release}")
        if self.version_tag:
            if ident.version is None:
                raise NamingError(f"Cannot tag with version, {ident} has no version")
            tags.append(ident.version)
        if self.latest_tag:
            tags.append("latest")
        if self.custom_tag:
            custom = self._render(self.custom_tag, variables).lower()
            if custom:
                tags.append(custom)

        return name, tags

    @staticmethod
    def _render(template: str, variables: dict) -> str:
        try:
            return _env.from_string(template).render(**variables).strip()
        except TemplateError as e:
            raise NamingError(f"Invalid naming template {template!r}: {e}") from e
