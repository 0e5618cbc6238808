"""
ObjectContext: change tracking for a graph of plain data objects.

The context tracks objects the host registers (and every object reachable from
them), evaluates them against private snapshots, and commits or rolls back
pending changes.

Lifecycle of a tracked object:
- register(): snapshot taken, status Unmodified (or Added)
- evaluate(): status/changeset recomputed from the live object
- delete(): soft (status Deleted) or hard (record dropped, object detached)
- accept_changes(): live state becomes the new baseline
- reject_changes(): live state restored from the baseline

Thread safety: Not thread-safe (all operations expected on one thread).
"""
from contextlib import contextmanager
from dataclasses import replace
import logging
from typing import Any, Callable, Dict, Generator, List, Mapping, Optional, Union

from objectcontext import collection_containers
from objectcontext.config import ContextConfig
from objectcontext.discovery import GraphDiscovery
from objectcontext.evaluator import EVALUATION_ERRORS, ChangeEvaluator
from objectcontext.exceptions import (
    AlreadyTrackedError,
    InvalidListenerError,
    NotAnObjectError,
    NotSubscribedError,
    TransportError,
)
from objectcontext.mapped_record import MappedRecord, ObjectStatus
from objectcontext.record_store import MappedRecordStore
from objectcontext.scheduler import ChangeDetectionScheduler
from objectcontext.snapshot_model import ChangeEntry, ChangesetItem, ContextChangeset
from objectcontext.transport import ChangeTransport
from objectcontext.value_kinds import (
    MISSING,
    ValueKind,
    deep_copy,
    delete_property,
    get_property,
    has_property,
    is_primitive,
    is_trackable_object,
    iter_properties,
    kind_of,
    set_property,
    values_differ,
)

logger = logging.getLogger(__name__)

ChangeListener = Callable[[bool], None]


class ObjectContext:
    """Tracks, evaluates, commits and rolls back an object graph.

    Objects are tracked by reference. Any object reachable from a registered
    object through properties or lists is tracked as well, and objects that
    appear later (e.g. appended to a list) are picked up as Added on the next
    evaluate().
    """

    def __init__(
        self,
        config: Optional[ContextConfig] = None,
        transport: Optional[ChangeTransport] = None,
        scheduler: Optional[ChangeDetectionScheduler] = None,
    ):
        self._config = config or ContextConfig()
        self._store = MappedRecordStore()
        self._discovery = GraphDiscovery(self._store, self._config)
        self._evaluator = ChangeEvaluator(self._store, self._discovery, self._config)

        self._change_listeners: List[ChangeListener] = []

        self._transport = transport
        self._scheduler = scheduler
        self._unwatch: Optional[Callable[[], None]] = None
        self._auto_evaluate = False
        self._batch_depth = 0

        # Flags a UI can bind to while the transport is busy
        self.is_loading = False
        self.is_submitting = False

        if self._config.auto_evaluate and scheduler is not None:
            self.set_auto_evaluate(True)

    @property
    def config(self) -> ContextConfig:
        return self._config

    def __contains__(self, obj: Any) -> bool:
        return obj in self._store

    def __len__(self) -> int:
        return len(self._store)

    # ========== CHANGE LISTENERS ==========

    def subscribe(self, listener: ChangeListener) -> int:
        """Subscribe a listener called with has_changes() after every evaluation.

        Returns:
            Number of subscribed listeners.
        """
        if not callable(listener):
            raise InvalidListenerError("The provided listener must be a function callback.")
        self._change_listeners.append(listener)
        logger.debug(f"Subscribed change listener: {listener}")
        return len(self._change_listeners)

    def unsubscribe(self, listener: ChangeListener) -> int:
        """Unsubscribe a listener; returns the number still subscribed."""
        if listener not in self._change_listeners:
            raise NotSubscribedError("The provided listener function was not subscribed.")
        self._change_listeners.remove(listener)
        logger.debug(f"Unsubscribed change listener: {listener}")
        return len(self._change_listeners)

    def _notify_listeners(self) -> None:
        """Call every listener once with the overall has_changes() value."""
        if not self._change_listeners:
            return
        has_changes = self.has_changes()
        for listener in list(self._change_listeners):
            try:
                listener(has_changes)
            except Exception as e:
                logger.warning(f"Change listener failed: {e}")

    # ========== REGISTRATION ==========

    def register(self, obj: Any, as_added: bool = False,
                 status: Union[ObjectStatus, str, None] = None) -> 'ObjectContext':
        """Start tracking ``obj`` and everything reachable from it.

        Args:
            obj: A dict, dataclass instance or plain object (not a list).
            as_added: Register as Added (a new object not yet persisted).
            status: Explicit initial status (ObjectStatus or its name);
                    overrides ``as_added``.

        Raises:
            NotAnObjectError: ``obj`` is not a trackable object.
            AlreadyTrackedError: ``obj`` is already tracked.
            InvalidStatusError: ``status`` is not a valid status literal.

        Returns:
            The context, so registrations can be chained.
        """
        if not is_trackable_object(obj):
            raise NotAnObjectError(
                f"Invalid object specified. Expected a dict, dataclass or object instance, "
                f"got {type(obj).__name__}."
            )
        if obj in self._store:
            raise AlreadyTrackedError("Object already exists in the context.")

        if status is not None:
            initial_status = ObjectStatus.parse(status)
        else:
            initial_status = ObjectStatus.ADDED if as_added else ObjectStatus.UNMODIFIED

        before = len(self._store)
        record = self._discovery.track(obj, initial_status)
        logger.debug(f"Registered {record.type_name} #{record.identifier} "
                     f"with {len(self._store) - before - 1} child object(s)")
        return self

    def is_tracked(self, obj: Any) -> bool:
        return obj in self._store

    # ========== EVALUATION ==========

    def evaluate(self) -> None:
        """Discover new objects, diff every live record, then notify listeners."""
        self._evaluator.run()
        self._notify_listeners()

    def _after_mutation(self) -> None:
        """Evaluate now, unless a batch() block will evaluate on exit."""
        if self._batch_depth == 0:
            self.evaluate()

    @contextmanager
    def batch(self) -> Generator['ObjectContext', None, None]:
        """Coalesce the evaluations triggered by delete/accept/reject.

        Nested blocks are supported; only the outermost block evaluates, once,
        when it exits.

        Example:
            with context.batch():
                context.delete(first)
                context.delete(second)
            # single evaluation (and listener notification) here
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self.evaluate()

    def set_auto_evaluate(self, enabled: bool) -> None:
        """Evaluate on every scheduler tick while enabled."""
        self._auto_evaluate = bool(enabled)

        if self._auto_evaluate and self._unwatch is None:
            if self._scheduler is None:
                logger.warning("Auto evaluation requested but no scheduler is attached")
                self._auto_evaluate = False
                return
            self._unwatch = self._scheduler.watch(self._on_scheduler_tick)
        elif not self._auto_evaluate and self._unwatch is not None:
            self._unwatch()
            self._unwatch = None

    def _on_scheduler_tick(self) -> None:
        if self._auto_evaluate and len(self._store) > 0:
            self.evaluate()

    # ========== QUERIES ==========

    def has_changes(self, obj: Any = None) -> bool:
        """Whether ``obj`` (or, without argument, any tracked object) has changes.

        An untracked ``obj`` has no changes.
        """
        if obj is not None:
            record = self._store.get(obj)
            return record is not None and record.has_changes()
        return any(record.has_changes() for record in self._store)

    def has_child_changes(self, obj: Any) -> bool:
        """Whether any tracked descendant of ``obj`` has changes."""
        record = self._store.require(obj)
        return any(child.has_changes() for child in self._descendants(record))

    def get_status(self, obj: Any) -> ObjectStatus:
        return self._store.require(obj).status

    def get_type(self, obj: Any) -> str:
        return self._store.require(obj).type_name

    def get_key(self, obj: Any) -> Any:
        return self._store.require(obj).key

    def get_identifier(self, obj: Any) -> int:
        return self._store.require(obj).identifier

    def get_original(self, obj: Any) -> Optional[Any]:
        """Deep copy of the baseline snapshot of ``obj``, or None if untracked."""
        record = self._store.get(obj)
        return deep_copy(record.original) if record is not None else None

    def get_record(self, obj: Any) -> MappedRecord:
        return self._store.require(obj)

    def get_objects(self, as_records: bool = False) -> List[Any]:
        """Every tracked object (Deleted included) in registration order."""
        records = self._store.records()
        return records if as_records else [record.current for record in records]

    def get_live_objects(self) -> List[Any]:
        """Tracked objects that are not Deleted."""
        return [record.current for record in self._store if record.status is not ObjectStatus.DELETED]

    def get_objects_by_status(self, status: Union[ObjectStatus, str], parents_only: bool = False) -> List[Any]:
        """Objects with ``status``; ``parents_only`` restricts to root objects."""
        status = ObjectStatus.parse(status)
        return [
            record.current for record in self._store
            if record.status is status and (not parents_only or record.is_root)
        ]

    def get_added_objects(self, parents_only: bool = False) -> List[Any]:
        return self.get_objects_by_status(ObjectStatus.ADDED, parents_only)

    def get_unmodified_objects(self, parents_only: bool = False) -> List[Any]:
        return self.get_objects_by_status(ObjectStatus.UNMODIFIED, parents_only)

    def get_modified_objects(self, parents_only: bool = False) -> List[Any]:
        return self.get_objects_by_status(ObjectStatus.MODIFIED, parents_only)

    def get_deleted_objects(self, parents_only: bool = False) -> List[Any]:
        return self.get_objects_by_status(ObjectStatus.DELETED, parents_only)

    def get_objects_by_type(self, type_name: str, include_deleted: bool = False) -> List[Any]:
        return [
            record.current for record in self._store
            if record.type_name == type_name
            and (include_deleted or record.status is not ObjectStatus.DELETED)
        ]

    def find_by_identifier(self, identifier: int) -> Optional[Any]:
        record = self._store.by_identifier(identifier)
        return record.current if record is not None else None

    def query(self, type_name: str, filters: Optional[Mapping[str, Any]] = None, **kwargs) -> List[Any]:
        """Live objects of ``type_name`` whose properties equal every filter value.

        Example:
            context.query('Person', name='Kieran')
            context.query('Person', {'age': 25})
        """
        criteria: Dict[str, Any] = dict(filters or {})
        criteria.update(kwargs)

        matches = []
        for record in self._store:
            if record.status is ObjectStatus.DELETED or record.type_name != type_name:
                continue
            if all(self._property_equals(record.current, name, value) for name, value in criteria.items()):
                matches.append(record.current)
        return matches

    @staticmethod
    def _property_equals(obj: Any, name: str, expected: Any) -> bool:
        value = get_property(obj, name)
        return value is not MISSING and value == expected

    # ========== CHANGESETS ==========

    def get_node_changeset(self, obj: Any, include_children: bool = False) -> List[ChangeEntry]:
        """Copies of the change entries of ``obj`` (and optionally its descendants)."""
        record = self._store.require(obj)
        entries = [replace(entry) for entry in record.changeset]
        if include_children:
            for child in self._descendants(record):
                entries.extend(replace(entry) for entry in child.changeset)
        return entries

    def get_changeset(self) -> ContextChangeset:
        """All pending objects grouped by status, ready to hand to a transport."""
        groups: Dict[ObjectStatus, List[ChangesetItem]] = {
            ObjectStatus.ADDED: [],
            ObjectStatus.MODIFIED: [],
            ObjectStatus.DELETED: [],
        }
        for record in self._store:
            if record.status in groups:
                groups[record.status].append(ChangesetItem(
                    identifier=record.identifier,
                    type_name=record.type_name,
                    key=record.key,
                    value=deep_copy(record.current),
                    changeset=[replace(entry) for entry in record.changeset],
                ))
        return ContextChangeset(
            added=groups[ObjectStatus.ADDED],
            modified=groups[ObjectStatus.MODIFIED],
            deleted=groups[ObjectStatus.DELETED],
        )

    # ========== GRAPH RELATIONSHIPS ==========

    def _is_descendant(self, record: MappedRecord, ancestor: Any) -> bool:
        """Walk the owner chain of ``record`` looking for ``ancestor``."""
        if record.root_parent is ancestor:
            return True
        seen = set()
        owner = record.owner
        while owner is not None and id(owner) not in seen:
            if owner is ancestor:
                return True
            seen.add(id(owner))
            owner_record = self._store.get(owner)
            owner = owner_record.owner if owner_record is not None else None
        return False

    def _descendants(self, record: MappedRecord) -> List[MappedRecord]:
        """Tracked records below ``record`` in registration order."""
        return [
            other for other in self._store
            if other is not record and self._is_descendant(other, record.current)
        ]

    def _live_object(self, record: MappedRecord, snapshot_value: Any,
                     exclude: Optional[MappedRecord] = None) -> Optional[Any]:
        """Tracked live object that a snapshot object of ``record`` was copied from.

        Objects that are no longer tracked (hard deleted) or are still Added
        have no committed place to return to.
        """
        live = record.live_counterpart(snapshot_value)
        if live is None:
            return None
        live_record = self._store.get(live)
        if live_record is None or live_record is exclude or live_record.status is ObjectStatus.ADDED:
            return None
        return live

    # ========== DELETION ==========

    def delete(self, obj: Any, hard: bool = False) -> None:
        """Delete a tracked object and cascade to its descendants.

        Soft delete marks the object Deleted and leaves it in the live graph
        until changes are accepted. Hard delete drops the records and detaches
        the object from its container. Added objects are always hard deleted.
        """
        record = self._store.require(obj)
        self._delete_record(record, hard)
        self._after_mutation()

    def delete_all(self, hard: bool = False) -> None:
        """Delete every root object (and so every tracked object)."""
        roots = [record for record in self._store if record.is_root]
        for record in roots:
            if self._store.contains_record(record):
                self._delete_record(record, hard)
        logger.info(f"Deleted {len(roots)} root object(s) (hard={hard})")
        self._after_mutation()

    def _delete_record(self, record: MappedRecord, hard: bool) -> None:
        if record.status is ObjectStatus.ADDED:
            hard = True

        descendants = self._descendants(record)

        if hard:
            self._hard_delete(record, descendants)
            return

        record.status = ObjectStatus.DELETED
        for child in descendants:
            if child.status is ObjectStatus.ADDED:
                # Never persisted: nothing to mark, just stop tracking it
                self._store.remove(child)
            else:
                child.status = ObjectStatus.DELETED
        if descendants:
            logger.info(f"Cascade deleted {len(descendants)} descendant(s) of "
                        f"{record.type_name} #{record.identifier}")

    def _hard_delete(self, record: MappedRecord, descendants: Optional[List[MappedRecord]] = None) -> None:
        """Drop ``record`` and its descendants and detach it from its container."""
        if descendants is None:
            descendants = self._descendants(record)
        for child in descendants:
            self._store.remove(child)
        self._detach(record)
        self._store.remove(record)
        logger.debug(f"Hard deleted {record.type_name} #{record.identifier} "
                     f"with {len(descendants)} descendant(s)")

    def _detach(self, record: MappedRecord) -> None:
        """Remove the object from the live container that holds it.

        List containers are spliced. An object container still pointing at
        the object gets that property reset to its baseline value.
        """
        parent = record.parent
        if parent is None:
            return
        if isinstance(parent, list):
            collection_containers.remove(parent, record.current)
            return
        if get_property(parent, record.property_name, None) is record.current:
            owner_record = self._store.get(parent)
            set_property(parent, record.property_name,
                         self._baseline_value(owner_record, record.property_name, exclude=record))

    def _baseline_value(self, owner_record: Optional[MappedRecord], name: str,
                        exclude: Optional[MappedRecord] = None) -> Any:
        """Live value matching the owner's snapshot of property ``name``.

        Snapshot objects map back to the tracked object originally held there;
        snapshot lists are refilled with the tracked elements; primitives are copied.
        """
        if owner_record is None:
            return None
        snapshot = get_property(owner_record.original, name, None)
        kind = kind_of(snapshot)
        if kind is ValueKind.OBJECT:
            return self._live_object(owner_record, snapshot, exclude=exclude)
        if kind is ValueKind.ARRAY:
            return self._restore_list(owner_record, name, snapshot, exclude=exclude)
        return deep_copy(snapshot)

    # ========== COMMIT ==========

    def accept_changes(self, save_results: Optional[Mapping[int, Any]] = None) -> None:
        """Make every pending change the new baseline.

        Deleted objects are detached from their containers and dropped; Added
        and Modified objects become Unmodified. Every surviving object gets a
        fresh snapshot.

        Args:
            save_results: Optional results of a save keyed by record identifier.
                          Scalar properties present on both the result and the
                          live object are copied onto the object and its
                          snapshot (e.g. server-assigned ids).
        """
        removed = 0
        for record in reversed(self._store.records()):
            if record.status is not ObjectStatus.DELETED:
                continue
            # Only the top of a deleted subtree is detached from the live graph
            owner_record = self._store.get(record.owner) if record.owner is not None else None
            if owner_record is None or owner_record.status is not ObjectStatus.DELETED:
                self._detach_deleted(record)
            self._store.remove(record)
            removed += 1

        if removed:
            # Siblings were removed from lists: container diffs must be redone
            self._evaluator.run()

        committed = 0
        for record in reversed(self._store.records()):
            if record.status is not ObjectStatus.UNMODIFIED:
                committed += 1
            # Unmodified records too, since object reorders are not diffed
            record.commit()

        if save_results:
            self._apply_save_results(save_results)

        logger.info(f"Accepted changes: {committed} committed, {removed} removed")
        self._after_mutation()
        self.reclaim_orphans()

    def _detach_deleted(self, record: MappedRecord) -> None:
        parent = record.parent
        if isinstance(parent, list):
            collection_containers.remove(parent, record.current)
        elif parent is not None and get_property(parent, record.property_name, None) is record.current:
            set_property(parent, record.property_name, None)

    def _apply_save_results(self, save_results: Mapping[int, Any]) -> None:
        for identifier, result in save_results.items():
            try:
                record = self._store.by_identifier(int(identifier))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring save result with invalid identifier: {identifier!r}")
                continue
            if record is None:
                logger.debug(f"No tracked object for save result #{identifier}")
                continue
            if not is_trackable_object(result):
                logger.warning(f"Ignoring save result #{identifier}: not an object")
                continue

            for name, value in iter_properties(result):
                if not self._config.is_trackable_name(name) or not is_primitive(value):
                    continue
                if not has_property(record.current, name):
                    continue
                live_value = get_property(record.current, name)
                if not is_primitive(live_value) or not values_differ(live_value, value):
                    continue
                set_property(record.current, name, deep_copy(value))
                set_property(record.original, name, deep_copy(value))
                logger.debug(f"Save result updated {record.type_name} #{record.identifier}.{name}")

    # ========== ROLLBACK ==========

    def reject_changes(self, obj: Any = None) -> None:
        """Discard pending changes for ``obj`` (and its descendants) or for everything.

        Added objects are hard deleted; every other object has its properties
        and status restored from its baseline. Lists are refilled in place so
        references held by application code stay valid.
        """
        if obj is not None:
            record = self._store.require(obj)
            if record.status is ObjectStatus.ADDED:
                self._hard_delete(record)
            else:
                for child in reversed(self._descendants(record)):
                    self._reject_record(child)
                self._reject_record(record)
        else:
            for record in reversed(self._store.records()):
                self._reject_record(record)

        self._after_mutation()

    def _reject_record(self, record: MappedRecord) -> None:
        if not self._store.contains_record(record):
            return
        if record.status is ObjectStatus.ADDED:
            self._hard_delete(record)
        else:
            self._restore(record)

    def _restore(self, record: MappedRecord) -> None:
        """Restore one record's live object and status from its snapshot."""
        current, original = record.current, record.original

        names = [name for name, _ in iter_properties(original) if self._config.is_trackable_name(name)]
        names.extend(
            name for name, _ in iter_properties(current)
            if self._config.is_trackable_name(name) and name not in names
        )

        for name in names:
            try:
                self._restore_property(record, name)
            except EVALUATION_ERRORS as e:
                logger.warning(f"Could not restore {record.type_name} #{record.identifier}.{name}: {e}")

        record.changes.clear()
        record.status = record.original_status

    def _restore_property(self, record: MappedRecord, name: str) -> None:
        current = record.current
        snapshot = get_property(record.original, name)
        live = get_property(current, name)

        if snapshot is MISSING:
            # Property added after the snapshot
            if live is not MISSING and kind_of(live) is not ValueKind.FUNCTION:
                delete_property(current, name)
            return

        kind = kind_of(snapshot)
        if kind is ValueKind.FUNCTION:
            return
        if kind is ValueKind.ARRAY:
            restored = self._restore_list(record, name, snapshot)
            if live is not restored:
                set_property(current, name, restored)
        elif kind is ValueKind.OBJECT:
            target = self._live_object(record, snapshot)
            if target is not None and live is not target:
                set_property(current, name, target)
        elif live is MISSING or values_differ(live, snapshot):
            set_property(current, name, deep_copy(snapshot))

    def _restore_list(self, record: MappedRecord, name: str, snapshot: list,
                      exclude: Optional[MappedRecord] = None, restoring: Optional[set] = None) -> list:
        """Refill the live list that ``snapshot`` was copied from, in place.

        Every object and nested list position is mapped back to the live value
        it was copied from, so element identity and order both match the
        snapshot. Object positions whose object is no longer tracked are
        dropped: those objects were hard deleted. A list with no live
        counterpart is rebuilt as a new list.
        """
        if restoring is None:
            restoring = set()
        target = record.live_counterpart(snapshot)
        if not isinstance(target, list):
            target = []
        if id(snapshot) in restoring:
            return target
        restoring.add(id(snapshot))

        items = []
        for element in snapshot:
            kind = kind_of(element)
            if kind is ValueKind.OBJECT:
                live = self._live_object(record, element, exclude=exclude)
                if live is None:
                    continue
                child = self._store.get(live)
                if child.owner is record.current and child.property_name == name:
                    child.parent = target
                items.append(live)
            elif kind is ValueKind.ARRAY:
                items.append(self._restore_list(record, name, element, exclude, restoring))
            else:
                items.append(deep_copy(element))
        collection_containers.replace_contents(target, items)
        return target

    # ========== ORPHAN RECLAMATION ==========

    def reclaim_orphans(self) -> int:
        """Drop records no longer reachable from the container that held them.

        Repeats until stable, since dropping a record can orphan its children.

        Returns:
            Number of records dropped.
        """
        removed = 0
        changed = True
        while changed:
            changed = False
            for record in self._store:
                if record.parent is None or record.property_name is None:
                    continue
                if not self._is_reachable(record):
                    self._store.remove(record)
                    removed += 1
                    changed = True
        if removed:
            logger.info(f"Reclaimed {removed} orphaned object(s)")
        return removed

    def _is_reachable(self, record: MappedRecord) -> bool:
        owner = record.owner
        if owner is not None and owner not in self._store:
            return False

        parent = record.parent
        if isinstance(parent, list):
            if not collection_containers.contains(parent, record.current):
                return False
            if owner is None:
                return True
            if collection_containers.reaches(get_property(owner, record.property_name, None), parent):
                return True
            return self._repoint(record, owner, lambda value: collection_containers.reaches(value, parent))

        if get_property(parent, record.property_name, None) is record.current:
            return True
        return self._repoint(record, parent, lambda value: value is record.current)

    def _repoint(self, record: MappedRecord, holder: Any, matches: Callable[[Any], bool]) -> bool:
        """Re-attach ``record`` to whichever property of ``holder`` now holds it."""
        for name, value in iter_properties(holder):
            if self._config.is_trackable_name(name) and matches(value):
                logger.debug(f"{record.type_name} #{record.identifier} moved from "
                             f"{record.property_name!r} to {name!r}")
                record.property_name = name
                return True
        return False

    # ========== TRANSPORT ==========

    def _require_transport(self) -> ChangeTransport:
        if self._transport is None:
            raise TransportError("No transport configured.")
        if not self._config.endpoint_uri:
            raise TransportError("No endpoint URI specified.")
        return self._transport

    def load(self, type_name: str, params: Optional[Mapping[str, Any]] = None,
             as_added: bool = False) -> List[Any]:
        """Fetch objects of ``type_name`` through the transport and track them."""
        if not type_name or not str(type_name).strip():
            raise TransportError("Invalid type specified.")
        transport = self._require_transport()

        self.is_loading = True
        try:
            objects = list(transport.fetch(type_name, dict(params or {}), self._config.endpoint_uri))
            for obj in objects:
                if obj not in self._store:
                    self.register(obj, as_added=as_added)
        finally:
            self.is_loading = False

        logger.info(f"Loaded {len(objects)} {type_name} object(s)")
        self.evaluate()
        return objects

    def save_changes(self) -> ContextChangeset:
        """Submit pending changes through the transport, then accept them.

        If the transport raises, nothing is accepted and the error propagates.
        """
        transport = self._require_transport()
        self.evaluate()
        changeset = self.get_changeset()

        self.is_submitting = True
        try:
            save_results = transport.submit(changeset, self._config.endpoint_uri)
        finally:
            self.is_submitting = False

        self.accept_changes(save_results or None)
        return changeset

    # ========== HOUSEKEEPING ==========

    def clear(self) -> None:
        """Stop tracking everything and drop all change listeners."""
        self._store.clear()
        self._change_listeners.clear()
        logger.debug("Cleared all tracked objects and change listeners")

    def log_state(self) -> None:
        """Log a summary of the context (INFO) and every record (DEBUG)."""
        records = self._store.records()
        roots = [record for record in records if record.is_root]
        logger.info(f"ObjectContext: has_changes={self.has_changes()} tracked={len(records)} "
                    f"roots={len(roots)} children={len(records) - len(roots)}")
        for status in ObjectStatus:
            count = sum(1 for record in records if record.status is status)
            logger.info(f"  {status.value}: {count}")
        for record in records:
            logger.debug(f"  {record!r}")
