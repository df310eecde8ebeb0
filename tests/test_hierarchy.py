import pytest

from taskhub.models import TaskStatus
from taskhub.services.hierarchy import HierarchyEvaluator
from taskhub.services.task_store import TaskStore


@pytest.fixture()
def hierarchy(session):
    return HierarchyEvaluator(TaskStore(session))


def test_childless_task_satisfies_every_predicate(hierarchy, make_task):
    task = make_task()

    assert hierarchy.all_children_todo(task)
    assert hierarchy.all_children_in_progress(task)
    assert hierarchy.all_children_done(task)


def test_predicates_follow_direct_children(hierarchy, make_task):
    parent = make_task("Parent")
    make_task("A", parent_id=parent.id, status=TaskStatus.DONE)
    make_task("B", parent_id=parent.id, status=TaskStatus.DONE)

    assert hierarchy.all_children_done(parent)
    assert not hierarchy.all_children_todo(parent)
    assert not hierarchy.all_children_in_progress(parent)


def test_mixed_children_satisfy_nothing(hierarchy, make_task):
    parent = make_task("Parent")
    make_task("A", parent_id=parent.id, status=TaskStatus.DONE)
    make_task("B", parent_id=parent.id, status=TaskStatus.IN_PROGRESS)

    for status in TaskStatus:
        assert not hierarchy.all_children_in(parent, status)


def test_grandchildren_are_not_consulted(hierarchy, make_task):
    root = make_task("Root")
    child = make_task("Child", parent_id=root.id, status=TaskStatus.DONE)
    make_task("Grandchild", parent_id=child.id, status=TaskStatus.TODO)

    assert hierarchy.all_children_done(root)


def test_predicates_reread_children(hierarchy, service, make_task):
    parent = make_task("Parent")
    child = make_task("Child", parent_id=parent.id)
    assert hierarchy.all_children_todo(parent)

    service.set_status(child, TaskStatus.DONE)

    assert not hierarchy.all_children_todo(parent)
    assert hierarchy.all_children_done(parent)


def test_in_subtree_of(hierarchy, make_task):
    root = make_task("Root")
    child = make_task("Child", parent_id=root.id)
    grandchild = make_task("Grandchild", parent_id=child.id)
    sibling = make_task("Sibling")

    assert hierarchy.in_subtree_of(root.id, root)
    assert hierarchy.in_subtree_of(grandchild.id, root)
    assert not hierarchy.in_subtree_of(sibling.id, root)
    assert not hierarchy.in_subtree_of(root.id, grandchild)
    assert not hierarchy.in_subtree_of(None, root)


def test_in_subtree_of_stops_at_dangling_parent(hierarchy, service, make_task):
    gone = make_task("Gone")
    orphan = make_task("Orphan", parent_id=gone.id)
    other = make_task("Other")
    service.delete_task(gone)

    assert not hierarchy.in_subtree_of(orphan.id, other)
