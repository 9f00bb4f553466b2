from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

import structlog
from fastmcp import FastMCP

from .config import SchedulerConfig
from .controller import SchedulerController
from .errors import ProviderError, ValidationError
from .logging_conf import setup_logging
from .models import Action, ScheduleRequest, ScheduleResult
from .provider import ComputeProvider

log = structlog.get_logger(__name__)

mcp = FastMCP("devtest-scheduler-mcp")


@dataclass(frozen=True)
class _Runtime:
    cfg: SchedulerConfig
    controller: SchedulerController

    def instance_id(self, explicit: Optional[str]) -> Optional[str]:
        return explicit or self.cfg.devtest_instance_id


_RUNTIME: Optional[_Runtime] = None


def _runtime_from_env() -> _Runtime:
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    cfg = SchedulerConfig.from_env()
    _RUNTIME = _Runtime(cfg=cfg, controller=SchedulerController.from_config(cfg))
    return _RUNTIME


def _guarded(tool: str, call: Callable[[_Runtime], Dict[str, Any]]) -> Dict[str, Any]:
    """Run a tool body; construction or unexpected failures become an error dict."""

    try:
        return call(_runtime_from_env())
    except Exception as exc:  # noqa: BLE001
        log.exception("mcp_tool_failed", tool=tool, error=str(exc))
        return {"ok": False, "error": f"Unexpected error: {exc}"}


def _result_to_dict(result: ScheduleResult) -> Dict[str, Any]:
    return {"ok": result.ok, "status_code": result.status_code, "message": result.message}


def transition_impl(controller: SchedulerController, action: Action, instance_id: Optional[str]) -> Dict[str, Any]:
    """Run one manual start/stop through the same path the trigger uses."""

    payload = {"action": action.value, "instance_id": instance_id or ""}
    return _result_to_dict(controller.handle(payload))


def instance_status_impl(
    provider: ComputeProvider, instance_id: str, expected_tags: Mapping[str, str]
) -> Dict[str, Any]:
    try:
        status = provider.describe(instance_id)
    except ProviderError as exc:
        return {"ok": False, "error": str(exc), "error_code": exc.code}

    missing = status.missing_tags(expected_tags)
    return {
        "ok": True,
        **status.to_dict(),
        "schedulable": not missing,
        "missing_tags": missing,
    }


def health_check_impl(cfg: SchedulerConfig, provider: ComputeProvider) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "service": "devtest-scheduler",
        "region": cfg.aws_region,
        "instance_id": cfg.devtest_instance_id,
        "start_schedule": cfg.start_schedule,
        "stop_schedule": cfg.stop_schedule,
    }
    if not cfg.devtest_instance_id:
        return {"ok": True, "reachable": None, **out}

    status = instance_status_impl(provider, cfg.devtest_instance_id, cfg.expected_tags)
    return {"ok": bool(status.get("ok")), "reachable": bool(status.get("ok")), "status": status, **out}


def _status(rt: _Runtime, instance_id: Optional[str]) -> Dict[str, Any]:
    target = rt.instance_id(instance_id)
    if not target:
        return {"ok": False, "error": "instance_id is required (or set DEVTEST_INSTANCE_ID)"}
    return instance_status_impl(rt.controller.provider, target, rt.cfg.expected_tags)


def _payload(rt: _Runtime, action: str, instance_id: Optional[str]) -> Dict[str, Any]:
    try:
        request = ScheduleRequest.from_payload({"action": action, "instance_id": rt.instance_id(instance_id)})
    except ValidationError as exc:
        return {"ok": False, "error": str(exc)}
    return {"ok": True, "payload": request.to_payload()}


@mcp.tool
def start_instance(instance_id: Optional[str] = None) -> Dict[str, Any]:
    """Start the Dev/Test instance (no-op success when it is already running)."""

    return _guarded(
        "start_instance",
        lambda rt: transition_impl(rt.controller, Action.START, rt.instance_id(instance_id)),
    )


@mcp.tool
def stop_instance(instance_id: Optional[str] = None) -> Dict[str, Any]:
    """Stop the Dev/Test instance (no-op success when it is already stopped)."""

    return _guarded(
        "stop_instance",
        lambda rt: transition_impl(rt.controller, Action.STOP, rt.instance_id(instance_id)),
    )


@mcp.tool
def instance_status(instance_id: Optional[str] = None) -> Dict[str, Any]:
    """Report the instance state and whether it carries the scheduling tags."""

    return _guarded("instance_status", lambda rt: _status(rt, instance_id))


@mcp.tool
def health_check() -> Dict[str, Any]:
    """Check configuration and, when an instance is configured, EC2 reachability."""

    return _guarded("health_check", lambda rt: health_check_impl(rt.cfg, rt.controller.provider))


@mcp.tool
def schedule_payload(action: str, instance_id: Optional[str] = None) -> Dict[str, Any]:
    """Validate and echo the payload a trigger rule would send, without calling EC2."""

    return _guarded("schedule_payload", lambda rt: _payload(rt, action, instance_id))


def run_stdio() -> None:
    cfg = SchedulerConfig.from_env()
    setup_logging(cfg.log_level, json_logs=cfg.log_json)
    transport = (os.environ.get("MCP_TRANSPORT") or cfg.mcp_transport or "stdio").lower().strip()

    if transport == "stdio":
        mcp.run(transport="stdio")
        return

    # FastMCP signature differs across versions, so keep it permissive.
    try:
        mcp.run(transport=transport, host=cfg.mcp_host, port=int(cfg.mcp_port))
    except TypeError:
        mcp.run(transport=transport)


if __name__ == "__main__":
    run_stdio()
