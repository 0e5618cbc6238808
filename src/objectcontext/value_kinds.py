"""
Uniform value-kind tagging and schema-less property access.

The engine never reflects on application types beyond what is needed here.
Every value is classified into one ValueKind, and objects expose their own
properties through iter_properties()/get_property()/set_property() regardless
of whether they are dicts, dataclasses or plain instances.
"""
from dataclasses import fields as dataclass_fields, is_dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from types import ModuleType
from typing import Any, Dict, Iterator, Tuple
import copy


class ValueKind(Enum):
    """Kind tag driving how a value is walked, compared and restored."""
    SCALAR = 'scalar'
    DATE = 'date'
    OBJECT = 'object'
    ARRAY = 'array'
    FUNCTION = 'function'


class _Missing:
    """Sentinel for a property that does not exist on an object."""

    def __repr__(self):
        return 'MISSING'

    def __bool__(self):
        return False


MISSING = _Missing()


def kind_of(value: Any) -> ValueKind:
    """Classify a value.

    Order matters: enums and classes carry a __dict__ but are scalars/functions,
    and datetime values must be caught before the generic object check.
    """
    if isinstance(value, list):
        return ValueKind.ARRAY
    if isinstance(value, (date, time)):
        return ValueKind.DATE
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, Enum):
        return ValueKind.SCALAR
    if isinstance(value, (type, ModuleType)) or callable(value):
        return ValueKind.FUNCTION
    if is_dataclass(value) or hasattr(value, '__dict__'):
        return ValueKind.OBJECT
    return ValueKind.SCALAR


def is_trackable_object(value: Any) -> bool:
    return kind_of(value) is ValueKind.OBJECT


def is_primitive(value: Any) -> bool:
    """Scalars and dates: values compared directly rather than tracked."""
    return kind_of(value) in (ValueKind.SCALAR, ValueKind.DATE)


def iter_properties(obj: Any) -> Iterator[Tuple[Any, Any]]:
    """Yield (name, value) for each own property of an object.

    - dict: its items
    - dataclass: declared fields (works for slotted dataclasses)
    - other instances: instance attributes from vars()

    Iterates over a snapshot so callers may mutate the object meanwhile.
    """
    if isinstance(obj, dict):
        yield from list(obj.items())
    elif is_dataclass(obj) and not hasattr(obj, '__dict__'):
        for f in dataclass_fields(obj):
            yield f.name, getattr(obj, f.name)
    else:
        yield from list(vars(obj).items())


def has_property(obj: Any, name: Any) -> bool:
    if isinstance(obj, dict):
        return name in obj
    if not isinstance(name, str):
        return False
    if hasattr(obj, '__dict__'):
        return name in vars(obj)
    return hasattr(obj, name)


def get_property(obj: Any, name: Any, default: Any = MISSING) -> Any:
    """Read an own property; return ``default`` when it does not exist."""
    if isinstance(obj, dict):
        return obj.get(name, default)
    if not has_property(obj, name):
        return default
    return getattr(obj, name)


def set_property(obj: Any, name: Any, value: Any) -> None:
    if isinstance(obj, dict):
        obj[name] = value
    else:
        setattr(obj, name, value)


def delete_property(obj: Any, name: Any) -> None:
    """Remove a property; dataclass fields cannot be removed and are set to None."""
    if isinstance(obj, dict):
        obj.pop(name, None)
    elif is_dataclass(obj) and name in {f.name for f in dataclass_fields(obj)}:
        setattr(obj, name, None)
    elif has_property(obj, name):
        delattr(obj, name)


def deep_copy(value: Any) -> Any:
    """Type-preserving deep copy used for snapshots; never aliases the input."""
    return copy.deepcopy(value)


def canonical_date(value: Any) -> str:
    """Canonical string form of a date-like value.

    Aware datetimes are converted to UTC first so two representations of the
    same instant compare equal.
    """
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


def comparable_form(value: Any) -> Any:
    """Form stored in change entries: dates become canonical strings."""
    if kind_of(value) is ValueKind.DATE:
        return canonical_date(value)
    if value is MISSING:
        return None
    return value


def values_differ(current: Any, original: Any) -> bool:
    """Compare a live primitive against its snapshot value.

    A date-valued pair differs if exactly one side is a date, or both are dates
    with different canonical instants. Anything else differs by inequality.
    """
    if current is MISSING or original is MISSING:
        return current is not original
    current_is_date = kind_of(current) is ValueKind.DATE
    original_is_date = kind_of(original) is ValueKind.DATE
    if current_is_date or original_is_date:
        if current_is_date != original_is_date:
            return True
        return canonical_date(current) != canonical_date(original)
    return bool(current != original)


def pair_references(snapshot: Any, live: Any) -> Dict[int, Tuple[Any, Any]]:
    """Map each object/list held by ``snapshot`` back to the live value it copies.

    ``snapshot`` must be a fresh deep copy of ``live``. Direct properties are
    paired, and lists are entered (nested lists too); objects are paired but
    not entered, since they carry their own snapshots. Keys are ``id()`` of
    the snapshot value; entries keep the snapshot value so the id stays valid.
    """
    refs: Dict[int, Tuple[Any, Any]] = {}
    for name, value in iter_properties(live):
        _pair_value(get_property(snapshot, name), value, refs)
    return refs


def _pair_value(snapshot_value: Any, live_value: Any, refs: Dict[int, Tuple[Any, Any]]) -> None:
    kind = kind_of(live_value)
    if kind is ValueKind.OBJECT:
        refs[id(snapshot_value)] = (snapshot_value, live_value)
    elif kind is ValueKind.ARRAY and isinstance(snapshot_value, list):
        if id(snapshot_value) in refs:
            return
        refs[id(snapshot_value)] = (snapshot_value, live_value)
        for snapshot_item, live_item in zip(snapshot_value, live_value):
            _pair_value(snapshot_item, live_item, refs)
