"""
Graph discovery: find and track the objects reachable from a tracked node.

Discovery runs once when a root is registered (recursively, through every new
child) and again from every live record on each evaluation, so objects that
were appended to lists or assigned to properties since the last pass become
tracked as Added.
"""
import logging
from typing import Any, List, Optional, Set

from objectcontext.config import ContextConfig
from objectcontext.mapped_record import MappedRecord, ObjectStatus
from objectcontext.record_store import MappedRecordStore
from objectcontext.value_kinds import ValueKind, deep_copy, get_property, iter_properties, kind_of

logger = logging.getLogger(__name__)


class GraphDiscovery:
    """Walks object graphs and registers untracked nodes in the store."""

    def __init__(self, store: MappedRecordStore, config: ContextConfig):
        self._store = store
        self._config = config

    # ==================== TYPE TAGGING ====================

    def resolve_type(self, obj: Any) -> str:
        """Logical type: the configured type property, else the class name."""
        if self._config.type_property:
            value = get_property(obj, self._config.type_property, None)
            if value is not None:
                return value if isinstance(value, str) else str(value)
        return type(obj).__name__

    def resolve_key(self, obj: Any) -> Any:
        if not self._config.key_property:
            return None
        return get_property(obj, self._config.key_property, None)

    # ==================== TRACKING ====================

    def track(
        self,
        obj: Any,
        status: ObjectStatus,
        root_parent: Optional[Any] = None,
        parent: Optional[Any] = None,
        owner: Optional[Any] = None,
        property_name: Optional[str] = None,
    ) -> MappedRecord:
        """Create a record for ``obj`` and recursively track its children.

        The caller is responsible for rejecting already-tracked objects.
        """
        # Only Added survives as a committed baseline; Modified/Deleted given at
        # registration roll back to Unmodified.
        original_status = status if status in (ObjectStatus.ADDED, ObjectStatus.UNMODIFIED) else ObjectStatus.UNMODIFIED
        record = MappedRecord(
            current=obj,
            original=deep_copy(obj),
            status=status,
            original_status=original_status,
            type_name=self.resolve_type(obj),
            key=self.resolve_key(obj),
            root_parent=root_parent,
            parent=parent,
            owner=owner,
            property_name=property_name,
        )
        self._store.add(record)

        child_status = ObjectStatus.ADDED if status is ObjectStatus.ADDED else ObjectStatus.UNMODIFIED
        self.discover_children(record, child_status)
        return record

    def discover_children(self, record: MappedRecord, status: ObjectStatus) -> List[MappedRecord]:
        """Track every untracked object directly reachable from ``record``.

        Objects are reachable through a property or through a (possibly
        nested) list held by a property. Already-tracked references are
        skipped silently, which also terminates cycles.

        Returns:
            Records created directly under ``record`` (their own children are
            tracked too but not listed).
        """
        obj = record.current
        root = record.root_parent if record.root_parent is not None else obj
        found: List[MappedRecord] = []

        for name, value in iter_properties(obj):
            if not self._config.is_trackable_name(name):
                continue

            kind = kind_of(value)
            if kind is ValueKind.ARRAY:
                self._walk_list(value, root, obj, name, status, found, set())
            elif kind is ValueKind.OBJECT and value not in self._store:
                found.append(self.track(value, status, root_parent=root, parent=obj, owner=obj, property_name=name))

        if found:
            logger.debug(f"Discovered {len(found)} new object(s) under {record.type_name} #{record.identifier}")
        return found

    def _walk_list(
        self,
        items: list,
        root: Any,
        owner: Any,
        property_name: str,
        status: ObjectStatus,
        found: List[MappedRecord],
        visited: Set[int],
    ) -> None:
        """Track objects inside a list; nested lists are flattened.

        Each object's ``parent`` is the innermost list holding it.
        """
        if id(items) in visited:
            return
        visited.add(id(items))

        for item in list(items):
            kind = kind_of(item)
            if kind is ValueKind.ARRAY:
                self._walk_list(item, root, owner, property_name, status, found, visited)
            elif kind is ValueKind.OBJECT and item not in self._store:
                found.append(self.track(item, status, root_parent=root, parent=items, owner=owner, property_name=property_name))
