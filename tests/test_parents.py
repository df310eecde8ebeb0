import pytest

from taskhub.errors import InvalidParent, ParentNotFound, TaskNotFound


def test_moves_task_under_new_parent(service, make_task):
    first = make_task("First")
    second = make_task("Second")
    child = make_task("Child", parent_id=first.id)

    moved = service.change_parent(child, second.id)

    assert moved.parent_id == second.id
    assert moved.parent.title == "Second"


def test_null_parent_makes_task_root_level(service, make_task):
    root = make_task("Root")
    child = make_task("Child", parent_id=root.id)

    moved = service.change_parent(child, None)

    assert moved.parent_id is None
    assert moved.parent is None


def test_unknown_parent_is_not_found(service, make_task):
    task = make_task()

    with pytest.raises(ParentNotFound) as excinfo:
        service.change_parent(task, "missing")

    assert isinstance(excinfo.value, TaskNotFound)
    assert service.get_task(task.id).parent_id is None


def test_cannot_move_under_itself(service, make_task):
    task = make_task()

    with pytest.raises(InvalidParent):
        service.change_parent(task, task.id)


def test_cannot_move_under_own_descendant(service, make_task):
    root = make_task("Root")
    child = make_task("Child", parent_id=root.id)
    grandchild = make_task("Grandchild", parent_id=child.id)

    with pytest.raises(InvalidParent):
        service.change_parent(root, grandchild.id)

    assert service.get_task(root.id).parent_id is None


def test_create_with_unknown_parent_is_rejected(service, owner):
    with pytest.raises(ParentNotFound):
        service.create_task({"title": "Lost", "parent_id": "missing"}, owner_id=owner.id)
