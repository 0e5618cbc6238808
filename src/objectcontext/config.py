"""
Context configuration consumed from the host application.

The host decides which property carries an object's logical type, which one
carries its identity key, and which property names are never tracked. The
endpoint URI is only handed to the transport collaborator; the diff engine
never reads it.
"""

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional


RESERVED_PREFIX = '_'


@dataclass(frozen=True)
class ContextConfig:
    """Immutable configuration for one ObjectContext.

    Attributes:
        type_property: Property holding the logical type name. When unset (or
                       absent on an object) the class name is used instead.
        key_property: Property holding the identity key of an object.
        ignored_properties: Property names that are never tracked or walked.
        endpoint_uri: Base URI handed to the transport on load/save.
        auto_evaluate: Evaluate on every scheduler tick when a scheduler is attached.
    """
    type_property: Optional[str] = None
    key_property: Optional[str] = None
    ignored_properties: FrozenSet[str] = field(default_factory=frozenset)
    endpoint_uri: Optional[str] = None
    auto_evaluate: bool = True

    def __post_init__(self):
        # Accept any iterable of names; frozen dataclass needs object.__setattr__
        if not isinstance(self.ignored_properties, frozenset):
            object.__setattr__(self, 'ignored_properties', frozenset(self.ignored_properties))
        if self.endpoint_uri is not None:
            object.__setattr__(self, 'endpoint_uri', self.endpoint_uri.strip())

    @property
    def excluded_properties(self) -> FrozenSet[str]:
        """All configured names that are never tracked (type, key, ignored)."""
        names = set(self.ignored_properties)
        if self.type_property:
            names.add(self.type_property)
        if self.key_property:
            names.add(self.key_property)
        return frozenset(names)

    def is_trackable_name(self, name: object) -> bool:
        """Reserved (leading underscore) and configured names are never tracked."""
        if not isinstance(name, str):
            return False
        if name.startswith(RESERVED_PREFIX):
            return False
        return name not in self.excluded_properties

    def with_overrides(self, **changes) -> 'ContextConfig':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
