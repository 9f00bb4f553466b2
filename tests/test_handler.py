import json
from types import SimpleNamespace

import pytest

import devtest_scheduler.handler as lambda_handler
from conftest import INSTANCE_ID, FakeComputeProvider, provider_error
from devtest_scheduler.controller import SchedulerController


@pytest.fixture
def provider():
    provider = FakeComputeProvider()
    lambda_handler.set_controller(SchedulerController(provider))
    yield provider
    lambda_handler.set_controller(None)


def _body(response):
    return json.loads(response["body"])


def test_handler_returns_wire_response(provider):
    context = SimpleNamespace(aws_request_id="req-1")
    response = lambda_handler.handler({"action": "start", "instance_id": INSTANCE_ID}, context)

    assert set(response) == {"statusCode", "body"}
    assert response["statusCode"] == 200
    assert _body(response) == f"Successfully initiated start for instance {INSTANCE_ID}."


def test_handler_validation_failure_is_400(provider):
    response = lambda_handler.handler({"action": "pause", "instance_id": INSTANCE_ID})

    assert response["statusCode"] == 400
    assert _body(response) == "Error: Invalid action 'pause'."
    assert provider.calls == []


def test_handler_already_stopped_is_200(provider):
    provider.error = provider_error("IncorrectInstanceState", "StopInstances")
    response = lambda_handler.handler({"action": "stop", "instance_id": INSTANCE_ID})

    assert response["statusCode"] == 200
    assert _body(response) == f"Instance {INSTANCE_ID} is already stopped."


def test_handler_init_failure_is_500(monkeypatch):
    def boom():
        raise RuntimeError("You must specify a region.")

    monkeypatch.setattr(lambda_handler, "_controller_from_env", boom)
    response = lambda_handler.handler({"action": "start", "instance_id": INSTANCE_ID})

    assert response["statusCode"] == 500
    assert _body(response) == "Unexpected error: You must specify a region."


def test_handler_builds_controller_once_per_container(monkeypatch):
    built = []

    def from_config(cfg, provider=None):
        built.append(cfg)
        return SchedulerController(FakeComputeProvider())

    monkeypatch.setattr(SchedulerController, "from_config", staticmethod(from_config))
    lambda_handler.set_controller(None)
    try:
        lambda_handler.handler({"action": "start", "instance_id": INSTANCE_ID})
        lambda_handler.handler({"action": "stop", "instance_id": INSTANCE_ID})
    finally:
        lambda_handler.set_controller(None)

    assert len(built) == 1
