"""
Identity-based helpers for ordered collections (lists) held in the graph.

Tracked objects are compared by reference, so ``list.index``/``list.remove``
(which use ``==``) cannot be used on them: two equal dicts are different nodes.
Restoration must also keep the identity of a live list, because application
code may hold a reference to it.
"""
from typing import Any, Iterable, List


def index_of(items: List[Any], obj: Any) -> int:
    """Index of ``obj`` in ``items`` by identity, or -1."""
    for index, item in enumerate(items):
        if item is obj:
            return index
    return -1


def contains(items: List[Any], obj: Any) -> bool:
    return index_of(items, obj) >= 0


def remove(items: List[Any], obj: Any) -> bool:
    """Splice ``obj`` out of ``items`` by identity; False if not present."""
    index = index_of(items, obj)
    if index < 0:
        return False
    del items[index]
    return True


def replace_contents(items: List[Any], new_items: Iterable[Any]) -> List[Any]:
    """Clear and refill ``items`` in place, preserving the list's identity."""
    items[:] = list(new_items)
    return items


def reaches(value: Any, target: List[Any]) -> bool:
    """True if ``value`` is ``target`` or a (nested) list containing it."""
    if value is target:
        return True
    if isinstance(value, list):
        return any(reaches(item, target) for item in value if isinstance(item, list))
    return False
