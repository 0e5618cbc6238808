"""
MappedRecord: tracking metadata for one live object.

A record pairs the live application object (``current``) with a private deep
snapshot (``original``) and everything the context needs to evaluate, commit
and roll back that object.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
import itertools

from objectcontext.exceptions import InvalidStatusError
from objectcontext.snapshot_model import ChangeEntry
from objectcontext.value_kinds import deep_copy, pair_references

# Process-local identifiers, stable for the life of a record
_identifiers = itertools.count(1)


class ObjectStatus(str, Enum):
    """Lifecycle status of a tracked object."""
    ADDED = 'Added'
    UNMODIFIED = 'Unmodified'
    MODIFIED = 'Modified'
    DELETED = 'Deleted'

    @classmethod
    def parse(cls, value: Union['ObjectStatus', str]) -> 'ObjectStatus':
        """Convert a status literal, accepting the legacy 'New' for Added."""
        if isinstance(value, cls):
            return value
        if value == 'New':
            return cls.ADDED
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatusError(f"Invalid object status: {value!r}") from None


def next_identifier() -> int:
    return next(_identifiers)


@dataclass(eq=False)
class MappedRecord:
    """
    Tracking record for one node of the object graph.

    Core attributes:
    - current: the live object (shared with the application, never copied)
    - original: deep snapshot taken at registration or last commit
    - status / original_status: live status and last committed status
    - changes: per-property ChangeEntry, insertion ordered, unique by name
    - snapshot_refs: snapshot objects/lists paired with their live originals

    Graph attributes:
    - root_parent: top-level tracked ancestor (None for roots)
    - parent: immediate container, an object or a list (None for roots)
    - owner: nearest tracked object holding this node (None for roots)
    - property_name: property on ``owner`` through which the node is reached
    """
    current: Any
    original: Any
    status: ObjectStatus
    original_status: ObjectStatus
    type_name: str
    key: Any = None
    root_parent: Optional[Any] = None
    parent: Optional[Any] = None
    owner: Optional[Any] = None
    property_name: Optional[str] = None
    identifier: int = field(default_factory=next_identifier)
    changes: Dict[str, ChangeEntry] = field(default_factory=dict)
    # id(snapshot object or list) -> (snapshot value, live value it was copied from)
    snapshot_refs: Dict[int, Tuple[Any, Any]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.snapshot_refs:
            self.snapshot_refs = pair_references(self.original, self.current)

    @property
    def changeset(self) -> List[ChangeEntry]:
        return list(self.changes.values())

    @property
    def is_root(self) -> bool:
        return self.root_parent is None

    def has_changes(self) -> bool:
        """Added/Modified/Deleted are changes even with an empty changeset."""
        return bool(self.changes) or self.status is not ObjectStatus.UNMODIFIED

    def take_snapshot(self) -> None:
        """Refresh ``original`` from the live object."""
        self.original = deep_copy(self.current)
        self.snapshot_refs = pair_references(self.original, self.current)

    def live_counterpart(self, snapshot_value: Any) -> Any:
        """Live object or list that ``snapshot_value`` was copied from, or None."""
        entry = self.snapshot_refs.get(id(snapshot_value))
        if entry is None or entry[0] is not snapshot_value:
            return None
        return entry[1]

    def commit(self) -> None:
        """Make the live state the new baseline."""
        self.changes.clear()
        self.status = ObjectStatus.UNMODIFIED
        self.original_status = ObjectStatus.UNMODIFIED
        self.take_snapshot()

    def __repr__(self) -> str:
        return (f"MappedRecord(id={self.identifier}, type={self.type_name!r}, "
                f"status={self.status.value}, changes={list(self.changes)})")
