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
Package identifier parsing and handling.
Parses identifiers like 'core/redis' or 'core/redis/4.0.14/20190319155852'.
"""

import re
from typing import Optional, Tuple
from dataclasses import dataclass

from ..errors import InvalidPackageIdent

_PART = re.compile(r"^[A-Za-z0-9_.+-]+$")


@dataclass(frozen=True)
class PackageIdent:
    """
    Parsed package identifier.

    Examples:
        - core/redis -> origin=core, name=redis
        - core/redis/4.0.14 -> adds version
        - core/redis/4.0.14/20190319155852 -> fully qualified
    """

    origin: str
    name: str
    version: Optional[str] = None
    release: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "PackageIdent":
        """
        Parse a package identifier string.

        Args:
            text: Identifier string with two to four slash-separated parts.

        Returns:
            Parsed PackageIdent object.
        """
        if not text:
            raise InvalidPackageIdent(text)

        parts = text.strip().split("/")
        if len(parts) < 2 or len(parts) > 4:
            raise InvalidPackageIdent(text)
        if not all(_PART.match(part) for part in parts):
            raise InvalidPackageIdent(text)

        origin, name = parts[0], parts[1]
        version = parts[2] if len(parts) > 2 else None
        release = parts[3] if len(parts) > 3 else None
        return cls(origin=origin, name=name, version=version, release=release)

    @property
    def fully_qualified(self) -> bool:
        """Whether both a version and a release are present."""
        return self.version is not None and self.release is not None

    def satisfies(self, other: "PackageIdent") -> bool:
        """
        Check whether this ident is matched by a possibly partial ident.

        'core/redis/4.0.14/2019' satisfies 'core/redis' and 'core/redis/4.0.14'.
        """
        if (self.origin, self.name) != (other.origin, other.name):
            return False
        if other.version is not None and other.version != self.version:
            return False
        if other.release is not None and other.release != self.release:
            return False
        return True

    def __str__(self) -> str:
        parts = [self.origin, self.name]
        if self.version is not None:
            parts.append(self.version)
            if self.release is not None:
                parts.append(self.release)
        return "/".join(parts)


def version_sort_key(version: str) -> Tuple:
    """
    Sort key comparing versions segment by segment.

    Numeric segments compare numerically and sort after textual ones, so
    '4.0.14' sorts after '4.0.9'.
    """
    key = []
    for segment in re.split(r"[.\-_]", version):
        if segment.isdigit():
            key.append((1, int(segment), ""))
        else:
            key.append((0, 0, segment))
    return tuple(key)
