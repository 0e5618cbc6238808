"""
Person editing demo.

Models the people/sports form the tracking engine was built for: a person has
a favorite sport (nested object) and favorite colors (list of strings). The
demo loads people through an in-memory transport, edits them the way a form
would, and saves or reverts the edits.

Run with: python examples/person_demo.py
"""

import logging
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Dict, List, Mapping, Optional

from objectcontext import (
    ChangeDetectionScheduler,
    ChangeTransport,
    ContextChangeset,
    ObjectContextFactory,
    join_endpoint,
)

logger = logging.getLogger(__name__)


@dataclass
class Sport:
    name: str
    description: str = ''


@dataclass
class Person:
    name: str
    age: int
    id: Optional[int] = None
    favorite_sport: Optional[Sport] = None
    favorite_colors: List[str] = field(default_factory=list)


class InMemoryPeopleService(ChangeTransport):
    """Stand-in for a REST service holding people."""

    def __init__(self):
        self._ids = count(100)
        self.requests: List[str] = []

    def fetch(self, type_name: str, params: Mapping[str, Any], endpoint_uri: Optional[str]) -> List[Any]:
        self.requests.append(f"GET {join_endpoint(endpoint_uri, type_name.lower())}")
        return [
            Person('Kieran', 25, id=1, favorite_sport=Sport('Football'), favorite_colors=['red', 'green']),
            Person('Ann', 31, id=2, favorite_sport=Sport('Tennis'), favorite_colors=['blue']),
        ]

    def submit(self, changeset: ContextChangeset, endpoint_uri: Optional[str]) -> Mapping[int, Any]:
        self.requests.append(f"POST {join_endpoint(endpoint_uri, 'changes')}")
        results: Dict[int, Any] = {}
        for item in changeset.added:
            if item.type_name == 'Person':
                results[item.identifier] = {'id': next(self._ids)}
        return results


def main():
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    service = InMemoryPeopleService()
    scheduler = ChangeDetectionScheduler()
    factory = ObjectContextFactory(endpoint_uri='http://localhost/api', transport=service, scheduler=scheduler)
    context = factory.get_instance()
    context.subscribe(lambda has_changes: logger.info(f"Save button enabled: {has_changes}"))

    kieran, ann = context.load('Person')

    # Form edits, picked up on the next change-detection tick
    kieran.favorite_sport.name = 'Rugby'
    kieran.favorite_colors.append('yellow')
    scheduler.tick()
    logger.info(f"Kieran child changes: {context.has_child_changes(kieran)}")
    for entry in context.get_node_changeset(kieran, include_children=True):
        logger.info(f"  {entry.property_name}: {entry.old_value!r} -> {entry.new_value!r}")

    # Cancel restores the form
    context.reject_changes(kieran)
    logger.info(f"After cancel: {kieran.favorite_sport.name}, {kieran.favorite_colors}")

    # A new person and a removal, saved together
    newcomer = Person('Jo', 19, favorite_sport=Sport('Climbing'))
    context.register(newcomer, as_added=True)
    context.delete(ann)
    context.log_state()

    context.save_changes()
    logger.info(f"Newcomer id assigned by the service: {newcomer.id}")
    logger.info(f"Requests: {service.requests}")


if __name__ == '__main__':
    main()
