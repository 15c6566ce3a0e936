from __future__ import annotations

from datetime import datetime, timezone

import pytest

from deploy_tracker.deploy import Deploy, DeployState, DeployStateError, User

STARTED = datetime(2016, 8, 4, 7, 28, tzinfo=timezone.utc)
FINISHED = datetime(2016, 8, 4, 7, 38, tzinfo=timezone.utc)


def _deploy() -> Deploy:
    return Deploy(user=User(id="1", name="Test User"), subject="Test deploy")


def test_new_deploy_is_pending() -> None:
    deploy = _deploy()
    assert deploy.state is DeployState.PENDING
    assert not deploy.in_progress


def test_start_then_finish() -> None:
    deploy = _deploy()
    deploy.start(STARTED)
    assert deploy.state is DeployState.IN_PROGRESS
    assert deploy.started_at == STARTED

    deploy.finish(FINISHED)
    assert deploy.state is DeployState.FINISHED
    assert deploy.finished_at == FINISHED
    assert deploy.aborted is False
    assert deploy.abort_reason == ""


def test_abort_records_reason() -> None:
    deploy = _deploy()
    deploy.start(STARTED)
    deploy.abort("something went wrong", FINISHED)

    assert deploy.state is DeployState.ABORTED
    assert deploy.aborted is True
    assert deploy.abort_reason == "something went wrong"


def test_abort_without_reason() -> None:
    deploy = _deploy()
    deploy.start(STARTED)
    deploy.abort()

    assert deploy.aborted is True
    assert deploy.abort_reason == ""
    assert deploy.finished_at is not None


def test_start_defaults_to_current_time() -> None:
    deploy = _deploy()
    before = datetime.now(timezone.utc)
    deploy.start()
    assert deploy.started_at is not None
    assert deploy.started_at >= before


def test_invalid_transitions_raise() -> None:
    deploy = _deploy()
    with pytest.raises(DeployStateError):
        deploy.finish()

    deploy.start(STARTED)
    with pytest.raises(DeployStateError):
        deploy.start(STARTED)

    deploy.finish(FINISHED)
    with pytest.raises(DeployStateError):
        deploy.abort("late")
    assert deploy.aborted is False


def test_payload_preserves_fields() -> None:
    deploy = _deploy()
    deploy.start(STARTED)
    deploy.abort("rollback", FINISHED)

    payload = deploy.to_payload()
    assert payload["started_at"] == STARTED.isoformat()
    assert Deploy.from_payload(payload) == deploy
