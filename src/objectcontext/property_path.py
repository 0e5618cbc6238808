"""
Explicit property paths.

A PropertyPath is an ordered tuple of access steps: a property name for
objects or an integer index for lists. Paths are resolved by direct traversal,
so the same path can be applied to a live object and to its snapshot.
"""
from dataclasses import dataclass
from typing import Any, Tuple, Union

from objectcontext.value_kinds import MISSING, get_property

Step = Union[str, int]


@dataclass(frozen=True)
class PropertyPath:
    """Immutable sequence of name/index steps."""
    steps: Tuple[Step, ...] = ()

    @classmethod
    def of(cls, *steps: Step) -> 'PropertyPath':
        return cls(steps=tuple(steps))

    def resolve(self, root: Any, default: Any = MISSING) -> Any:
        """Walk the path from ``root``.

        A missing final property returns ``default``. A missing intermediate
        step or an index into a non-list raises LookupError/TypeError, which
        is how structural drift surfaces to callers.
        """
        value = root
        for position, step in enumerate(self.steps):
            is_last = position == len(self.steps) - 1
            if isinstance(step, int):
                if not isinstance(value, list):
                    raise TypeError(f"Cannot index {type(value).__name__} at {self}")
                if step >= len(value):
                    if is_last:
                        return default
                    raise IndexError(f"Index {step} out of range at {self}")
                value = value[step]
            else:
                value = get_property(value, step)
                if value is MISSING:
                    if is_last:
                        return default
                    raise KeyError(f"Missing property {step!r} at {self}")
        return value

    def __str__(self) -> str:
        parts = []
        for step in self.steps:
            parts.append(f"[{step}]" if isinstance(step, int) else f".{step}")
        return ''.join(parts) or '<root>'
