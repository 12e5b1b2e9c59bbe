"""
Grouping of flat upstream lists by container id.
"""

from typing import Hashable, Iterable, Iterator, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

GroupMap = dict[K, list[V]]


def group(pairs: Iterable[tuple[K, V]]) -> GroupMap[K, V]:
    """
    Bucket values by key.

    Every value is kept, duplicates included, in arrival order. Keys appear
    in the order they were first seen.
    """
    groups: dict[K, list[V]] = {}
    for key, value in pairs:
        groups.setdefault(key, []).append(value)
    return groups


def flatten(groups: GroupMap[K, V]) -> Iterator[tuple[K, V]]:
    """Inverse of ``group``: yield ``(key, value)`` pairs bucket by bucket."""
    for key, values in groups.items():
        for value in values:
            yield key, value
