"""
Changeset dataclasses reported by the ObjectContext.

ChangeEntry is the per-property delta kept on each tracked record.
ChangesetItem and ContextChangeset are the read-only report handed to a
transport when pending changes are saved.

Design Philosophy:
- Change entries are mutable only by the evaluator (new_value is upserted)
- Reports are frozen and carry deep copies, never live references
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ChangeEntry:
    """Delta for one changed property of one tracked object.

    Date values are kept in canonical string form; list values as shallow
    copies of the list at evaluation time.
    """
    property_name: str
    old_value: Any
    new_value: Any

    def to_dict(self) -> Dict:
        return {
            'property_name': self.property_name,
            'old_value': self.old_value,
            'new_value': self.new_value,
        }


@dataclass(frozen=True)
class ChangesetItem:
    """One pending object in a context-wide changeset."""
    identifier: int
    type_name: str
    key: Any
    value: Any  # deep copy of the live object
    changeset: List[ChangeEntry]

    def to_dict(self) -> Dict:
        return {
            'identifier': self.identifier,
            'type': self.type_name,
            'key': self.key,
            'value': self.value,
            'changeset': [entry.to_dict() for entry in self.changeset],
        }


@dataclass(frozen=True)
class ContextChangeset:
    """All pending objects grouped by status."""
    added: List[ChangesetItem] = field(default_factory=list)
    modified: List[ChangesetItem] = field(default_factory=list)
    deleted: List[ChangesetItem] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.deleted)

    def find(self, identifier: int) -> Optional[ChangesetItem]:
        """Look up an item by record identifier across all groups."""
        for item in self.added + self.modified + self.deleted:
            if item.identifier == identifier:
                return item
        return None

    def to_dict(self) -> Dict:
        """Export keyed by status name."""
        return {
            'Added': [item.to_dict() for item in self.added],
            'Modified': [item.to_dict() for item in self.modified],
            'Deleted': [item.to_dict() for item in self.deleted],
        }
