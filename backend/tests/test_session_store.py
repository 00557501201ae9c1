import pytest

from timetabler.api.deps import SessionStore
from timetabler.core.exceptions import ConfigurationError, ResourceNotFoundError
from timetabler.services.session import create_session


def test_store_round_trip(reference, grid):
    store = SessionStore()
    session = store.add(create_session(reference, grid), max_sessions=2)

    assert store.get(session.id) is session
    store.remove(session.id)
    with pytest.raises(ResourceNotFoundError):
        store.get(session.id)
    with pytest.raises(ResourceNotFoundError):
        store.remove(session.id)


def test_store_refuses_sessions_beyond_limit(reference, grid):
    store = SessionStore()
    store.add(create_session(reference, grid), max_sessions=1)

    with pytest.raises(ConfigurationError):
        store.add(create_session(reference, grid), max_sessions=1)


def test_sessions_are_independent(reference, grid):
    first = create_session(reference, grid)
    second = create_session(reference, grid)
    first.teaching.assign("9a", "math", "t2")
    first.ledger.set_allocation("g9", "math", 1, 18)

    assert first.id != second.id
    assert second.teaching.active_teacher_id("9a", "math") == "t1"
    assert second.ledger.weekly_hours("g9", "math") == 5
