"""
Expansion of an image name and its tags into engine addresses.
"""
from typing import List, Sequence


def expand(name: str, tags: Sequence[str]) -> List[str]:
    """
    Returns the non-empty list of addresses an image is known by.

    An untagged image is known by its name alone; a tagged one by
    `name:tag` for each tag, in tag order:

        core/redis
        core/redis:4.0.14-20190319155852
        core/redis:4.0.14
        core/redis:latest

    :param name: Base name of the image.
    :param tags: Possibly empty tags, duplicates included.
    :return: One address per tag, or just the name.
    """
    if not tags:
        return [name]
    return [f"{name}:{tag}" for tag in tags]


class Identified:
    """
    Mixin for anything with a `name` and `tags` that the engine addresses.
    """
    name: str
    tags: List[str]

    def expanded_identifiers(self) -> List[str]:
        return expand(self.name, self.tags)
