import json

import pytest
from botocore.exceptions import NoRegionError

from conftest import INSTANCE_ID, FakeComputeProvider, provider_error
from devtest_scheduler import cli


@pytest.fixture
def provider(monkeypatch):
    provider = FakeComputeProvider()
    monkeypatch.setattr(cli, "_build_provider", lambda cfg: provider)
    return provider


def test_invoke_start(provider, capsys):
    code = cli.main(["invoke", "--action", "start", "--instance-id", INSTANCE_ID])

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["statusCode"] == 200
    assert provider.calls == [("start", INSTANCE_ID)]


def test_invoke_uses_configured_instance(provider, monkeypatch, capsys):
    monkeypatch.setenv("DEVTEST_INSTANCE_ID", INSTANCE_ID)

    assert cli.main(["invoke", "--action", "stop"]) == 0
    assert provider.calls == [("stop", INSTANCE_ID)]


def test_invoke_invalid_action_exits_nonzero(provider, capsys):
    code = cli.main(["invoke", "--action", "hibernate", "--instance-id", INSTANCE_ID])

    out = json.loads(capsys.readouterr().out)
    assert code == 1
    assert out["statusCode"] == 400
    assert provider.calls == []


def test_invoke_provider_failure_exits_nonzero(provider, capsys):
    provider.error = provider_error("UnauthorizedOperation")

    assert cli.main(["invoke", "--action", "start", "--instance-id", INSTANCE_ID]) == 1
    assert json.loads(capsys.readouterr().out)["statusCode"] == 500


def test_status_reports_missing_tags(provider, capsys):
    assert cli.main(["status", "--instance-id", INSTANCE_ID]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out["state"] == "stopped"
    assert out["schedulable"] is False
    assert out["missing_tags"] == {"Environment": "Development", "AutoSchedule": "True"}


def test_status_without_instance_id_is_usage_error(provider, capsys):
    assert cli.main(["status"]) == 2
    assert "DEVTEST_INSTANCE_ID" in capsys.readouterr().err


def test_rules_prints_both_rules(capsys):
    assert cli.main(["rules", "--instance-id", INSTANCE_ID]) == 0

    rules = json.loads(capsys.readouterr().out)
    assert [r["name"] for r in rules] == ["StartDevTestInstanceRule", "StopDevTestInstanceRule"]
    assert rules[1]["input"] == {"action": "stop", "instance_id": INSTANCE_ID}


def _no_region(cfg):
    raise NoRegionError()


def test_invoke_client_construction_failure_is_500(monkeypatch, capsys):
    monkeypatch.setattr(cli, "_build_provider", _no_region)

    code = cli.main(["invoke", "--action", "start", "--instance-id", INSTANCE_ID])

    out = json.loads(capsys.readouterr().out)
    assert code == 1
    assert out["statusCode"] == 500
    assert json.loads(out["body"]) == "Unexpected error: You must specify a region."


def test_status_client_construction_failure_is_reported(monkeypatch, capsys):
    monkeypatch.setattr(cli, "_build_provider", _no_region)

    code = cli.main(["status", "--instance-id", INSTANCE_ID])

    out = json.loads(capsys.readouterr().out)
    assert code == 1
    assert out == {"ok": False, "error": "Unexpected error: You must specify a region."}
