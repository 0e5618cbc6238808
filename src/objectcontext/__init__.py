"""
Change tracking for in-memory object graphs.

This package tracks plain application objects (dicts, dataclasses, ordinary
instances) by reference, detects what changed against private snapshots, and
commits or rolls back those changes.

Key Features:
- Registration of whole object graphs (nested objects and lists included)
- Incremental discovery of objects added to the graph after registration
- Per-property changesets with canonical date comparison
- Soft/hard deletion with cascade to descendants
- accept_changes()/reject_changes() with list identity preserved on rollback
- Orphan reclamation for nodes detached from their containers
- Change listeners, batching, and an optional scheduler/transport for hosts

Quick Start:
    >>> from objectcontext import ObjectContext
    >>>
    >>> person = {'name': 'Kieran', 'pets': [{'name': 'Tiger'}]}
    >>> context = ObjectContext()
    >>> context.register(person)
    >>>
    >>> person['pets'][0]['name'] = 'Jack'
    >>> context.evaluate()
    >>> context.has_child_changes(person)
    True
    >>> context.reject_changes()
    >>> person['pets'][0]['name']
    'Tiger'

Statuses:
    Added       registered as new, or discovered after registration
    Unmodified  matches its snapshot
    Modified    at least one direct property differs from its snapshot
    Deleted     soft deleted, removed from the graph on accept_changes()

Modules:
    - object_context: ObjectContext facade (register/evaluate/commit/rollback)
    - factory: ObjectContextFactory (shared or per-call contexts)
    - evaluator: diff engine behind evaluate()
    - discovery: graph walking and record creation
    - mapped_record / record_store: per-object tracking records
    - snapshot_model: change entries and changeset reports
    - value_kinds / property_path: schema-less value access
    - scheduler / transport: host integration boundaries
"""

# Context
from objectcontext.object_context import ObjectContext
from objectcontext.factory import ObjectContextFactory

# Configuration
from objectcontext.config import ContextConfig

# Records and statuses
from objectcontext.mapped_record import MappedRecord, ObjectStatus

# Changesets
from objectcontext.snapshot_model import ChangeEntry, ChangesetItem, ContextChangeset

# Values
from objectcontext.value_kinds import MISSING, ValueKind, kind_of
from objectcontext.property_path import PropertyPath

# Host integration
from objectcontext.scheduler import ChangeDetectionScheduler
from objectcontext.transport import ChangeTransport, join_endpoint

# Errors
from objectcontext.exceptions import (
    ObjectContextError,
    NotAnObjectError,
    AlreadyTrackedError,
    InvalidStatusError,
    NotTrackedError,
    InvalidListenerError,
    NotSubscribedError,
    TransportError,
)

__all__ = [
    # Context
    'ObjectContext',
    'ObjectContextFactory',
    # Configuration
    'ContextConfig',
    # Records
    'MappedRecord',
    'ObjectStatus',
    # Changesets
    'ChangeEntry',
    'ChangesetItem',
    'ContextChangeset',
    # Values
    'MISSING',
    'ValueKind',
    'kind_of',
    'PropertyPath',
    # Host integration
    'ChangeDetectionScheduler',
    'ChangeTransport',
    'join_endpoint',
    # Errors
    'ObjectContextError',
    'NotAnObjectError',
    'AlreadyTrackedError',
    'InvalidStatusError',
    'NotTrackedError',
    'InvalidListenerError',
    'NotSubscribedError',
    'TransportError',
]

__version__ = '1.0.0'
__author__ = 'ObjectContext Team'
__description__ = 'Change tracking for in-memory object graphs'
