"""Tests for registering object graphs and discovering their children."""
import pytest
from dataclasses import dataclass

from objectcontext import (
    AlreadyTrackedError,
    InvalidStatusError,
    NotAnObjectError,
    NotTrackedError,
    ObjectContext,
    ObjectContextError,
    ObjectStatus,
)


class TestRegister:
    """Top-level registration."""

    def test_plain_registration_is_unmodified(self, context, person):
        """A registered graph starts Unmodified with no changes."""
        context.register(person)
        assert context.get_status(person) is ObjectStatus.UNMODIFIED
        assert context.has_changes() is False

    def test_register_as_added(self, context, person):
        """as_added marks the root and every child as Added."""
        context.register(person, as_added=True)
        assert context.get_status(person) is ObjectStatus.ADDED
        assert context.get_status(person.favorite_sport) is ObjectStatus.ADDED
        assert context.get_status(person.pets[0]) is ObjectStatus.ADDED
        assert context.has_changes() is True

    def test_register_returns_context_for_chaining(self, context):
        """register() can be chained."""
        first, second = {'name': 'a'}, {'name': 'b'}
        assert context.register(first).register(second) is context
        assert len(context) == 2

    def test_status_literals(self, context):
        """Status may be given as an ObjectStatus or its string value."""
        new = {'name': 'new'}
        legacy = {'name': 'legacy'}
        context.register(new, status='Added')
        context.register(legacy, status='New')
        assert context.get_status(new) is ObjectStatus.ADDED
        assert context.get_status(legacy) is ObjectStatus.ADDED

    def test_invalid_status_literal(self, context):
        """Unknown status literals are rejected."""
        with pytest.raises(InvalidStatusError):
            context.register({'name': 'x'}, status='Bogus')
        assert len(context) == 0

    def test_registered_as_modified_rolls_back_to_unmodified(self, context):
        """Only Added or Unmodified are kept as the committed status."""
        obj = {'name': 'x'}
        context.register(obj, status=ObjectStatus.MODIFIED)
        assert context.get_status(obj) is ObjectStatus.MODIFIED
        context.reject_changes()
        assert context.get_status(obj) is ObjectStatus.UNMODIFIED

    @pytest.mark.parametrize('value', [[{'name': 'a'}], 42, 'text', None])
    def test_non_objects_rejected(self, context, value):
        """Lists and primitives cannot be registered."""
        with pytest.raises(NotAnObjectError):
            context.register(value)

    def test_duplicate_registration_rejected(self, context, person):
        """Registering a tracked reference again is an error."""
        context.register(person)
        with pytest.raises(AlreadyTrackedError):
            context.register(person)
        with pytest.raises(AlreadyTrackedError):
            context.register(person.favorite_sport)

    def test_errors_share_builtin_bases(self, context):
        """Usage errors can be caught as the matching builtin."""
        with pytest.raises(TypeError):
            context.register([1, 2])
        with pytest.raises(KeyError):
            context.get_status({'name': 'untracked'})
        with pytest.raises(ObjectContextError):
            context.get_status({'name': 'untracked'})

    def test_not_tracked_message_is_plain(self, context):
        """NotTrackedError does not quote its message like KeyError does."""
        with pytest.raises(NotTrackedError) as exc_info:
            context.get_type({'name': 'untracked'})
        assert str(exc_info.value).startswith('Object is not tracked')


class TestDiscovery:
    """Children reachable from a registered root."""

    def test_children_are_tracked(self, context, person):
        """Nested objects and list elements get their own records."""
        context.register(person)
        assert context.get_objects() == [person, person.favorite_sport, person.pets[0], person.pets[1]]
        assert person in context
        assert context.is_tracked(person.pets[1])

    def test_primitive_list_elements_not_tracked(self, tracked_person, context):
        """Scalar list elements are compared, never tracked."""
        assert len(context) == 4
        assert not context.is_tracked(tracked_person.favorite_colors)

    def test_graph_attributes(self, tracked_person, context):
        """Records point back at their root, container and owning property."""
        sport = context.get_record(tracked_person.favorite_sport)
        assert sport.root_parent is tracked_person
        assert sport.parent is tracked_person
        assert sport.owner is tracked_person
        assert sport.property_name == 'favorite_sport'

        pet = context.get_record(tracked_person.pets[0])
        assert pet.parent is tracked_person.pets
        assert pet.owner is tracked_person
        assert pet.property_name == 'pets'
        assert context.get_record(tracked_person).is_root

    def test_nested_lists_are_flattened(self, context):
        """Objects inside nested lists are parented by the innermost list."""
        cell = {'v': 1}
        root = {'grid': [[cell], [{'v': 2}]]}
        context.register(root)
        assert len(context) == 3
        assert context.get_record(cell).parent is root['grid'][0]
        assert context.get_record(cell).owner is root

    def test_cycles_terminate(self, context):
        """Shared and cyclic references are tracked once."""
        a = {'name': 'a'}
        b = {'name': 'b', 'peer': a}
        a['peer'] = b
        context.register(a)
        assert len(context) == 2
        context.evaluate()
        assert context.has_changes() is False

    def test_reserved_and_ignored_properties_not_walked(self, typed_context):
        """Underscore and configured names are never tracked."""
        root = {'kind': 'Person', 'id': 1, '_private': {'x': 1}, 'cache': {'y': 2}, 'child': {'z': 3}}
        typed_context.register(root)
        assert len(typed_context) == 2
        assert not typed_context.is_tracked(root['_private'])
        assert not typed_context.is_tracked(root['cache'])

    def test_plain_instances_are_objects(self, context):
        """Ordinary class instances are walked through their attributes."""
        class Owner:
            def __init__(self):
                self.name = 'owner'
                self.address = Address()

        @dataclass
        class Address:
            city: str = 'Leeds'

        owner = Owner()
        context.register(owner)
        assert context.get_type(owner) == 'Owner'
        assert context.get_type(owner.address) == 'Address'


class TestTypeAndKey:
    """Logical type and identity key resolution."""

    def test_type_and_key_from_properties(self, typed_context):
        obj = {'kind': 'Person', 'id': 7, 'name': 'A'}
        typed_context.register(obj)
        assert typed_context.get_type(obj) == 'Person'
        assert typed_context.get_key(obj) == 7

    def test_type_falls_back_to_class_name(self, typed_context):
        obj = {'name': 'A'}
        typed_context.register(obj)
        assert typed_context.get_type(obj) == 'dict'
        assert typed_context.get_key(obj) is None

    def test_identifiers_are_unique_and_increasing(self, context, person):
        context.register(person)
        identifiers = [context.get_identifier(obj) for obj in context.get_objects()]
        assert identifiers == sorted(identifiers)
        assert len(set(identifiers)) == len(identifiers)

    def test_contexts_are_independent(self, person):
        first, second = ObjectContext(), ObjectContext()
        first.register(person)
        assert person in first
        assert person not in second
