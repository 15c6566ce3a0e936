from __future__ import annotations

from datetime import datetime, timedelta, timezone

from deploy_tracker.deploy import Deploy, User
from deploy_tracker.storage import InMemoryDeployLog

BASE = datetime(2016, 8, 4, 9, 28, tzinfo=timezone.utc)
USER = User(id="1", name="Test User")


def _started(subject: str, minutes: int) -> Deploy:
    deploy = Deploy(user=USER, subject=subject)
    deploy.start(BASE + timedelta(minutes=minutes))
    return deploy


def test_get_on_unknown_channel() -> None:
    store = InMemoryDeployLog()
    assert store.get("C1") is None
    assert store.all("C1") == []
    assert store.since("C1", BASE) == []


def test_set_then_get_returns_equal_copy() -> None:
    store = InMemoryDeployLog()
    deploy = _started("api", 0)
    deploy.abort("nope", BASE + timedelta(minutes=3))

    store.set("C1", deploy)
    loaded = store.get("C1")

    assert loaded == deploy
    assert loaded is not deploy
    loaded.subject = "mutated"
    assert store.get("C1").subject == "api"


def test_set_replaces_in_progress_record_it_was_derived_from() -> None:
    store = InMemoryDeployLog()
    store.set("C1", _started("api", 0))

    current = store.get("C1")
    current.finish(BASE + timedelta(minutes=5))
    store.set("C1", current)

    assert store.all("C1") == [current]


def test_set_appends_new_records() -> None:
    store = InMemoryDeployLog()
    first = _started("api", 0)
    first.finish(BASE + timedelta(minutes=1))
    store.set("C1", first)
    second = _started("web", 2)
    store.set("C1", second)

    assert [deploy.subject for deploy in store.all("C1")] == ["api", "web"]
    assert store.get("C1") == second


def test_since_filters_by_start_time() -> None:
    store = InMemoryDeployLog()
    for index, subject in enumerate(["one", "two", "three"]):
        deploy = _started(subject, index * 10)
        deploy.finish(BASE + timedelta(minutes=index * 10 + 5))
        store.set("C1", deploy)

    assert [d.subject for d in store.since("C1", BASE + timedelta(minutes=10))] == ["two", "three"]
    assert store.since("C1", BASE + timedelta(hours=1)) == []
