import pytest
from fastapi.testclient import TestClient

from conftest import FakeOrchestrator, deployment
from fake_marathon import MarathonState, create_app
from mdeploy.client import MarathonClient
from mdeploy.deploy import deploy
from mdeploy.errors import OrchestratorHTTPError, UpdateFailed, WaitFailed, OrchestratorUnavailable
from mdeploy.events import EventLog
from mdeploy.models import ApplicationSpec, WaitConfig
from mdeploy.waiter import WaitOutcome

HOST = "http://testserver"


def test_first_deploy_creates_and_waits_for_rollout(clock, tmp_path):
    state = MarathonState()
    state.finish_after_polls = 2
    events = EventLog(str(tmp_path / "events.db"), host=HOST)
    with TestClient(create_app(state)) as http:
        client = MarathonClient(HOST, http=http)
        result = deploy(
            client,
            ApplicationSpec.model_validate({"id": "/web", "instances": 1}),
            HOST,
            WaitConfig(wait=True, timeout_s=10),
            events=events,
            clock=clock,
            sleep=clock.sleep,
        )

    assert result.action == "created"
    assert result.outcome is WaitOutcome.CONVERGED
    assert state.polls == 3
    assert clock.now == 2.0

    messages = [e["message"] for e in reversed(events.latest())]
    assert messages[0] == f"deploying Marathon config for /web to {HOST}"
    assert messages[1] == "/web does not exist yet - will be created"
    assert messages[-1].startswith("All deployments are started:")


def test_redeploy_updates_and_has_nothing_to_wait_for(clock):
    state = MarathonState()
    state.apps["/web"] = {"id": "/web"}
    with TestClient(create_app(state)) as http:
        result = deploy(
            MarathonClient(HOST, http=http),
            ApplicationSpec(id="/web"),
            HOST,
            WaitConfig(wait=True),
            clock=clock,
            sleep=clock.sleep,
        )

    assert result.action == "updated"
    assert result.outcome is WaitOutcome.CONVERGED
    assert state.polls == 0
    assert ("PUT", "/v2/apps/web?force=false") in state.requests


def test_redeploy_while_locked_fails_without_polling(clock):
    state = MarathonState()
    state.apps["/web"] = {"id": "/web"}
    state.start_deployment("/web")
    with TestClient(create_app(state)) as http:
        with pytest.raises(UpdateFailed) as exc:
            deploy(MarathonClient(HOST, http=http), ApplicationSpec(id="/web"), HOST, WaitConfig(wait=True), clock=clock, sleep=clock.sleep)

    assert isinstance(exc.value.cause, OrchestratorHTTPError)
    assert exc.value.cause.status_code == 409
    assert state.polls == 0


def test_create_without_deployment_refs_issues_no_polls(clock):
    client = FakeOrchestrator(created_deployments=[])
    result = deploy(client, ApplicationSpec(id="/web"), HOST, WaitConfig(wait=True, timeout_s=2), clock=clock, sleep=clock.sleep)

    assert result.outcome is WaitOutcome.CONVERGED
    assert "list_deployments" not in client.names()
    assert clock.now == 0.0


def test_wait_failure_after_successful_create(clock):
    client = FakeOrchestrator(created_deployments=["dep1"])
    client.fail_on["list_deployments"] = OrchestratorUnavailable("down")

    with pytest.raises(WaitFailed):
        deploy(client, ApplicationSpec(id="/web"), HOST, WaitConfig(wait=True), clock=clock, sleep=clock.sleep)

    assert client.names() == ["exists", "create", "list_deployments"]


def test_timeout_is_reported_not_raised(clock):
    client = FakeOrchestrator(created_deployments=["dep1"], deployments=lambda poll: [deployment("dep1", "/web")])
    result = deploy(client, ApplicationSpec(id="/web"), HOST, WaitConfig(wait=True, timeout_s=2), clock=clock, sleep=clock.sleep)

    assert result.outcome is WaitOutcome.TIMED_OUT
    assert result.to_dict() == {"id": "/web", "action": "created", "deployments": ["dep1"], "wait": "timed_out"}


def test_no_wait_means_two_calls_total(clock):
    client = FakeOrchestrator(created_deployments=["dep1"])
    result = deploy(client, ApplicationSpec(id="/web"), HOST, WaitConfig(wait=False), clock=clock, sleep=clock.sleep)
    assert result.outcome is WaitOutcome.SKIPPED
    assert client.names() == ["exists", "create"]
