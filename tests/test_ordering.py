from datetime import datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.task.ordering import ORDERING, next_position, next_position_in_scope, reorder


def _user(db, email="order@taskboard.io"):
    u = User(email=email, password_hash="x")
    db.add(u)
    db.commit()
    return u


def _read_order(db, user):
    return [t.id for t in db.scalars(select(Task).where(Task.user_id == user.id).order_by(*ORDERING))]


def test_next_position_of_empty_scope_is_zero():
    assert next_position([]) == 0
    assert next_position([None]) == 0


def test_next_position_is_one_past_max():
    assert next_position([0]) == 1
    assert next_position([0, 3, 1]) == 4
    assert next_position([2, 2]) == 3


def test_scopes_are_per_project_and_no_project(db):
    user = _user(db)
    db.add_all(
        [
            Task(user_id=user.id, title="a", project_id=None, position=5),
            Task(user_id=user.id, title="b", project_id=7, position=2),
        ]
    )
    db.commit()

    assert next_position_in_scope(db, user.id, None) == 6
    assert next_position_in_scope(db, user.id, 7) == 3
    assert next_position_in_scope(db, user.id, 8) == 0


def test_scope_is_per_user(db):
    alice = _user(db, "a@taskboard.io")
    bob = _user(db, "b@taskboard.io")
    db.add(Task(user_id=alice.id, title="a", position=9))
    db.commit()
    assert next_position_in_scope(db, bob.id, None) == 0


def test_reorder_matches_submitted_sequence(db):
    user = _user(db)
    tasks = [Task(user_id=user.id, title=str(i), position=i) for i in range(5)]
    db.add_all(tasks)
    db.commit()

    wanted = [tasks[3].id, tasks[0].id, tasks[4].id, tasks[1].id, tasks[2].id]
    assert reorder(db, user.id, wanted) == 5
    assert _read_order(db, user) == wanted


def test_reorder_empty_and_single(db):
    user = _user(db)
    task = Task(user_id=user.id, title="only", position=4)
    db.add(task)
    db.commit()

    assert reorder(db, user.id, []) == 0
    assert reorder(db, user.id, [task.id]) == 1
    db.refresh(task)
    assert task.position == 0


def test_reorder_skips_tasks_of_other_users(db):
    alice = _user(db, "a@taskboard.io")
    bob = _user(db, "b@taskboard.io")
    mine = Task(user_id=alice.id, title="mine", position=3)
    theirs = Task(user_id=bob.id, title="theirs", position=3)
    db.add_all([mine, theirs])
    db.commit()

    assert reorder(db, alice.id, [theirs.id, mine.id]) == 1
    db.refresh(theirs)
    db.refresh(mine)
    assert theirs.position == 3
    assert mine.position == 1


def test_equal_positions_fall_back_to_newest_first(db):
    user = _user(db)
    base = datetime(2026, 1, 1, 12, 0)
    older = Task(user_id=user.id, title="older", position=0, created_at=base)
    newer = Task(user_id=user.id, title="newer", position=0, created_at=base + timedelta(minutes=1))
    first = Task(user_id=user.id, title="first", position=-1, created_at=base)
    db.add_all([older, newer, first])
    db.commit()

    assert _read_order(db, user) == [first.id, newer.id, older.id]


def test_reorder_failure_is_raised_and_earlier_writes_stay(db, monkeypatch):
    user = _user(db)
    tasks = [Task(user_id=user.id, title=str(i), position=10 + i) for i in range(4)]
    db.add_all(tasks)
    db.commit()
    ids = [t.id for t in tasks]

    real_execute = db.execute
    calls = []

    def execute(statement, *args, **kwargs):
        calls.append(statement)
        if len(calls) == 3:
            raise OperationalError("UPDATE tasks", {}, Exception("database is locked"))
        return real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db, "execute", execute)
    with pytest.raises(OperationalError):
        reorder(db, user.id, list(reversed(ids)))
    monkeypatch.undo()
    db.rollback()

    positions = dict(db.execute(select(Task.id, Task.position)).all())
    assert positions == {ids[3]: 0, ids[2]: 1, ids[1]: 11, ids[0]: 10}
