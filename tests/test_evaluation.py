"""Tests for evaluate(): discovery of new objects and per-property diffs."""
import logging
from datetime import date, datetime, timedelta, timezone
from enum import Enum

from objectcontext import ChangeEntry, ObjectStatus


class Color(Enum):
    RED = 'red'
    BLUE = 'blue'


class Touchy:
    """Scalar-like value whose comparison fails."""
    __slots__ = ()

    def __ne__(self, other):
        raise ValueError("cannot compare")


def test_evaluate_is_idempotent(tracked_person, context):
    """Evaluating an unchanged graph reports nothing, however often."""
    context.evaluate()
    context.evaluate()
    assert context.has_changes() is False
    assert all(context.get_status(obj) is ObjectStatus.UNMODIFIED for obj in context.get_objects())


def test_pet_rename_changeset(tracked_person, context):
    """Renaming Tiger to Jack yields exactly one change entry."""
    tiger = tracked_person.pets[0]
    tiger['name'] = 'Jack'
    context.evaluate()

    assert context.get_status(tiger) is ObjectStatus.MODIFIED
    assert context.get_node_changeset(tiger) == [ChangeEntry('name', 'Tiger', 'Jack')]
    assert context.get_status(tracked_person) is ObjectStatus.UNMODIFIED


def test_nested_edit_does_not_modify_parent(tracked_person, context):
    """Editing a nested object flags the child and the parent's child changes."""
    tracked_person.favorite_sport.name = 'Rugby'
    context.evaluate()

    assert context.get_status(tracked_person) is ObjectStatus.UNMODIFIED
    assert context.get_status(tracked_person.favorite_sport) is ObjectStatus.MODIFIED
    assert context.has_changes(tracked_person) is False
    assert context.has_child_changes(tracked_person) is True


def test_repeated_edits_update_new_value(tracked_person, context):
    """A second edit updates the entry instead of adding another."""
    tracked_person.name = 'Kai'
    context.evaluate()
    tracked_person.name = 'Kim'
    context.evaluate()
    assert context.get_node_changeset(tracked_person) == [ChangeEntry('name', 'Kieran', 'Kim')]


def test_reverting_by_hand_clears_status(tracked_person, context):
    """Setting a value back to its snapshot removes the change."""
    tracked_person.age = 26
    context.evaluate()
    assert context.get_status(tracked_person) is ObjectStatus.MODIFIED

    tracked_person.age = 25
    context.evaluate()
    assert context.get_node_changeset(tracked_person) == []
    assert context.get_status(tracked_person) is ObjectStatus.UNMODIFIED


def test_added_object_keeps_added_status(context):
    obj = {'name': 'draft'}
    context.register(obj, as_added=True)
    obj['name'] = 'final'
    context.evaluate()
    assert context.get_status(obj) is ObjectStatus.ADDED
    assert context.get_node_changeset(obj)[0].new_value == 'final'


class TestListProperties:
    """List diffs: length first, then primitive positions."""

    def test_appended_primitive(self, tracked_person, context):
        tracked_person.favorite_colors.append('blue')
        context.evaluate()
        entry = context.get_node_changeset(tracked_person)[0]
        assert entry.property_name == 'favorite_colors'
        assert entry.old_value == ['red', 'green']
        assert entry.new_value == ['red', 'green', 'blue']

    def test_reordered_primitives(self, tracked_person, context):
        tracked_person.favorite_colors.reverse()
        context.evaluate()
        assert context.get_status(tracked_person) is ObjectStatus.MODIFIED

    def test_appended_object_is_discovered_as_added(self, tracked_person, context):
        """New list elements become Added and change the list length."""
        puppy = {'name': 'Bo', 'species': 'dog'}
        tracked_person.pets.append(puppy)
        context.evaluate()

        assert context.get_status(puppy) is ObjectStatus.ADDED
        assert context.get_record(puppy).root_parent is tracked_person
        assert context.get_status(tracked_person) is ObjectStatus.MODIFIED

    def test_swapped_objects_are_not_a_list_change(self, tracked_person, context):
        """Object positions are diffed as their own records."""
        tracked_person.pets.reverse()
        context.evaluate()
        assert context.get_status(tracked_person) is ObjectStatus.UNMODIFIED

    def test_soft_deleted_elements_not_counted(self, tracked_person, context):
        context.delete(tracked_person.pets[1])
        assert context.get_status(tracked_person) is ObjectStatus.MODIFIED
        assert context.get_node_changeset(tracked_person)[0].property_name == 'pets'

    def test_nested_list_change(self, context):
        root = {'grid': [[1, 2], [3]]}
        context.register(root)
        root['grid'][1].append(4)
        context.evaluate()
        assert context.get_status(root) is ObjectStatus.MODIFIED


class TestScalarProperties:
    """Scalars, dates and properties that appear or disappear."""

    def test_equal_date_is_unchanged(self, tracked_person, context):
        tracked_person.birthday = date(1990, 4, 12)
        context.evaluate()
        assert context.has_changes() is False

    def test_changed_date_uses_canonical_strings(self, tracked_person, context):
        tracked_person.birthday = date(1991, 4, 12)
        context.evaluate()
        assert context.get_node_changeset(tracked_person) == [ChangeEntry('birthday', '1990-04-12', '1991-04-12')]

    def test_same_instant_in_other_timezone(self, context):
        obj = {'when': datetime(2020, 1, 1, 12, tzinfo=timezone.utc)}
        context.register(obj)
        obj['when'] = datetime(2020, 1, 1, 13, tzinfo=timezone(timedelta(hours=1)))
        context.evaluate()
        assert context.has_changes() is False

    def test_date_replaced_by_string(self, context):
        obj = {'when': date(2020, 1, 1)}
        context.register(obj)
        obj['when'] = '2020-01-01'
        context.evaluate()
        assert context.get_status(obj) is ObjectStatus.MODIFIED

    def test_enum_values(self, context):
        obj = {'color': Color.RED}
        context.register(obj)
        obj['color'] = Color.BLUE
        context.evaluate()
        assert context.get_node_changeset(obj) == [ChangeEntry('color', Color.RED, Color.BLUE)]

    def test_added_property(self, context):
        obj = {'name': 'a'}
        context.register(obj)
        obj['nickname'] = 'A'
        context.evaluate()
        assert context.get_node_changeset(obj) == [ChangeEntry('nickname', None, 'A')]

    def test_removed_property(self, context):
        obj = {'name': 'a', 'species': 'cat'}
        context.register(obj)
        del obj['species']
        context.evaluate()
        assert context.get_node_changeset(obj) == [ChangeEntry('species', 'cat', None)]

    def test_reserved_and_function_properties_ignored(self, context):
        obj = {'name': 'a'}
        context.register(obj)
        obj['_cache'] = 123
        obj['callback'] = lambda: None
        context.evaluate()
        assert context.has_changes() is False

    def test_ignored_properties(self, typed_context):
        obj = {'kind': 'Person', 'id': 1, 'cache': 1, 'name': 'a'}
        typed_context.register(obj)
        obj['kind'] = 'Robot'
        obj['cache'] = 2
        typed_context.evaluate()
        assert typed_context.has_changes() is False

    def test_comparison_errors_are_logged_and_skipped(self, context, caplog):
        obj = {'weird': Touchy(), 'name': 'a'}
        context.register(obj)
        obj['name'] = 'b'
        with caplog.at_level(logging.WARNING, logger='objectcontext.evaluator'):
            context.evaluate()
        assert any('weird' in message for message in caplog.messages)
        assert context.get_node_changeset(obj) == [ChangeEntry('name', 'a', 'b')]
