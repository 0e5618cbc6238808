"""Pytest configuration and shared fixtures."""
import pytest
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from objectcontext import ChangeTransport, ContextConfig, ObjectContext


@dataclass
class Sport:
    """Nested object held directly by a property."""
    name: str
    players: int = 11


@dataclass
class Person:
    """Graph root used across tests: scalars, a date, a nested object and lists."""
    name: str
    age: int = 30
    birthday: Optional[date] = None
    favorite_sport: Optional[Sport] = None
    favorite_colors: List[str] = field(default_factory=list)
    pets: List[dict] = field(default_factory=list)


@pytest.fixture
def context():
    """Fresh context with default configuration."""
    return ObjectContext()


@pytest.fixture
def typed_config():
    """Configuration reading type and key from dict properties."""
    return ContextConfig(type_property='kind', key_property='id', ignored_properties={'cache'})


@pytest.fixture
def typed_context(typed_config):
    return ObjectContext(config=typed_config)


@pytest.fixture
def person():
    return Person(
        name='Kieran',
        age=25,
        birthday=date(1990, 4, 12),
        favorite_sport=Sport('Football'),
        favorite_colors=['red', 'green'],
        pets=[{'name': 'Tiger', 'species': 'cat'}, {'name': 'Rex', 'species': 'dog'}],
    )


@pytest.fixture
def tracked_person(context, person):
    """Person registered as Unmodified."""
    context.register(person)
    return person


class RecordingTransport(ChangeTransport):
    """In-memory transport returning canned objects and recording submissions."""

    def __init__(self, objects=None, save_results=None, fail_submit=False):
        self.objects = objects or []
        self.save_results = save_results or {}
        self.fail_submit = fail_submit
        self.fetched = []
        self.submitted = []

    def fetch(self, type_name, params, endpoint_uri):
        self.fetched.append((type_name, params, endpoint_uri))
        return list(self.objects)

    def submit(self, changeset, endpoint_uri):
        if self.fail_submit:
            raise ConnectionError("server unavailable")
        self.submitted.append((changeset, endpoint_uri))
        return self.save_results


@pytest.fixture
def transport():
    return RecordingTransport()
