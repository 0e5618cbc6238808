"""
Identity-keyed store of MappedRecords.

Objects are looked up by reference (``id()``), never by value: two equal dicts
are two different tracked nodes. Every record keeps a strong reference to its
object, so an id cannot be recycled while the record is stored.
"""
import logging
from typing import Any, Dict, Iterator, List, Optional

from objectcontext.exceptions import NotTrackedError
from objectcontext.mapped_record import MappedRecord

logger = logging.getLogger(__name__)


class MappedRecordStore:
    """Insertion-ordered registry of tracked records.

    Thread safety: Not thread-safe (all operations expected on one thread).
    """

    def __init__(self):
        self._records: Dict[int, MappedRecord] = {}

    def __contains__(self, obj: Any) -> bool:
        record = self._records.get(id(obj))
        return record is not None and record.current is obj

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MappedRecord]:
        # Snapshot so callers can add/remove while iterating
        return iter(list(self._records.values()))

    def get(self, obj: Any) -> Optional[MappedRecord]:
        record = self._records.get(id(obj))
        if record is not None and record.current is obj:
            return record
        return None

    def require(self, obj: Any) -> MappedRecord:
        """Return the record for ``obj`` or raise NotTrackedError."""
        record = self.get(obj)
        if record is None:
            raise NotTrackedError(f"Object is not tracked by this context: {type(obj).__name__}")
        return record

    def add(self, record: MappedRecord) -> None:
        self._records[id(record.current)] = record
        logger.debug(f"Tracked {record.type_name} #{record.identifier} "
                     f"(status={record.status.value}, root={record.is_root})")

    def remove(self, record: MappedRecord) -> bool:
        """Drop a record; returns False if it was already gone."""
        stored = self._records.get(id(record.current))
        if stored is not record:
            return False
        del self._records[id(record.current)]
        logger.debug(f"Untracked {record.type_name} #{record.identifier}")
        return True

    def contains_record(self, record: MappedRecord) -> bool:
        return self._records.get(id(record.current)) is record

    def by_identifier(self, identifier: int) -> Optional[MappedRecord]:
        for record in self._records.values():
            if record.identifier == identifier:
                return record
        return None

    def records(self) -> List[MappedRecord]:
        return list(self._records.values())

    def clear(self) -> None:
        self._records.clear()
