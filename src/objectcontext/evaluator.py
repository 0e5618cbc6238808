"""
Change evaluator: the diff engine behind ObjectContext.evaluate().

Each tracked record is compared property by property against its own snapshot.
Only the record's direct properties are compared: nested objects are tracked
nodes with their own records, so a parent is never "modified" because a
child's field changed.
"""
import logging
from typing import Any, List

from objectcontext.config import ContextConfig
from objectcontext.discovery import GraphDiscovery
from objectcontext.mapped_record import MappedRecord, ObjectStatus
from objectcontext.property_path import PropertyPath
from objectcontext.record_store import MappedRecordStore
from objectcontext.snapshot_model import ChangeEntry
from objectcontext.value_kinds import (
    MISSING,
    ValueKind,
    comparable_form,
    deep_copy,
    iter_properties,
    kind_of,
    values_differ,
)

logger = logging.getLogger(__name__)

# Raised by property access/comparison when the graph drifted mid-evaluation
EVALUATION_ERRORS = (LookupError, AttributeError, TypeError, ValueError)


class ChangeEvaluator:
    """Recomputes status and changesets for every live record."""

    def __init__(self, store: MappedRecordStore, discovery: GraphDiscovery, config: ContextConfig):
        self._store = store
        self._discovery = discovery
        self._config = config

    def run(self) -> None:
        """One full pass: incremental discovery, then a diff of every live record."""
        for record in self._store:
            if record.status is not ObjectStatus.DELETED:
                self._discovery.discover_children(record, ObjectStatus.ADDED)

        for record in self._store:
            if record.status is not ObjectStatus.DELETED:
                self.check_record(record)

    # ==================== PER-RECORD DIFF ====================

    def check_record(self, record: MappedRecord) -> None:
        """Diff one record's direct properties against its snapshot."""
        for name in self._trackable_names(record):
            path = PropertyPath.of(name)
            try:
                live_value = path.resolve(record.current)
                snapshot_value = path.resolve(record.original)
                self._check_property(record, name, live_value, snapshot_value)
            except EVALUATION_ERRORS as e:
                logger.warning(f"Skipping {record.type_name} #{record.identifier} property {path}: {e}")

        # Every edit was reverted by hand: nothing left to report
        if record.status is ObjectStatus.MODIFIED and not record.changes:
            record.status = record.original_status
            logger.debug(f"{record.type_name} #{record.identifier} reverted to {record.status.value}")

    def _trackable_names(self, record: MappedRecord) -> List[Any]:
        """Live property names, then names only present in the snapshot."""
        names = [name for name, _ in iter_properties(record.current) if self._config.is_trackable_name(name)]
        seen = set(names)
        for name, _ in iter_properties(record.original):
            if name not in seen and self._config.is_trackable_name(name):
                names.append(name)
        return names

    def _check_property(self, record: MappedRecord, name: str, live_value: Any, snapshot_value: Any) -> None:
        live_kind = kind_of(live_value) if live_value is not MISSING else None
        snapshot_kind = kind_of(snapshot_value) if snapshot_value is not MISSING else None

        if ValueKind.FUNCTION in (live_kind, snapshot_kind):
            return

        if live_kind is ValueKind.ARRAY:
            differs = self.list_differs(live_value, snapshot_value)
            self._record_difference(record, name, differs, snapshot_value, list(live_value))
            return

        if live_kind is ValueKind.OBJECT:
            # Nested node: carries its own status and changeset
            return
        if live_value is MISSING and snapshot_kind is ValueKind.OBJECT:
            return

        differs = values_differ(live_value, snapshot_value)
        self._record_difference(record, name, differs, snapshot_value, live_value)

    def list_differs(self, live_items: Any, snapshot_items: Any) -> bool:
        """Compare a live list against its snapshot.

        Elements whose tracked status is Deleted are not counted. A length
        mismatch is a change on its own; with equal lengths primitive elements
        are compared by position, while object elements are skipped (they are
        diffed as their own records).
        """
        if not isinstance(snapshot_items, list):
            return True

        live = [item for item in live_items if not self._is_deleted(item)]
        if len(live) != len(snapshot_items):
            return True

        for current, original in zip(live, snapshot_items):
            current_kind, original_kind = kind_of(current), kind_of(original)
            if ValueKind.FUNCTION in (current_kind, original_kind):
                continue
            if ValueKind.OBJECT in (current_kind, original_kind):
                if current_kind is not original_kind:
                    return True
                continue
            if ValueKind.ARRAY in (current_kind, original_kind):
                if current_kind is not original_kind or self.list_differs(current, original):
                    return True
                continue
            if values_differ(current, original):
                return True
        return False

    def _is_deleted(self, item: Any) -> bool:
        record = self._store.get(item)
        return record is not None and record.status is ObjectStatus.DELETED

    # ==================== CHANGESET UPSERT ====================

    def _record_difference(self, record: MappedRecord, name: str, differs: bool,
                           snapshot_value: Any, live_value: Any) -> None:
        entry = record.changes.get(name)

        if not differs:
            if entry is not None:
                # Value is back to its snapshot: the change no longer exists
                del record.changes[name]
            return

        new_value = comparable_form(live_value)
        if entry is not None:
            entry.new_value = new_value
        else:
            old_value = comparable_form(snapshot_value)
            if kind_of(old_value) in (ValueKind.ARRAY, ValueKind.OBJECT):
                old_value = deep_copy(old_value)
            record.changes[name] = ChangeEntry(property_name=name, old_value=old_value, new_value=new_value)
            logger.debug(f"{record.type_name} #{record.identifier}: {name!r} changed")

        if record.status is ObjectStatus.UNMODIFIED:
            record.status = ObjectStatus.MODIFIED
