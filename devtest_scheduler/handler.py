"""AWS Lambda entrypoint (``devtest_scheduler.handler.handler``).

The EventBridge rules invoke this with a fixed payload::

    {"action": "start"|"stop", "instance_id": "i-xxxxxxxxxxxxxxxxx"}

and discard the ``{"statusCode": ..., "body": ...}`` response.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog

from .config import SchedulerConfig
from .controller import SchedulerController
from .logging_conf import setup_logging
from .models import ScheduleResult

log = structlog.get_logger(__name__)

_CONTROLLER: Optional[SchedulerController] = None


def set_controller(controller: Optional[SchedulerController]) -> None:
    """Replace the cached controller (``None`` rebuilds it from the environment)."""

    global _CONTROLLER
    _CONTROLLER = controller


def _controller_from_env() -> SchedulerController:
    # Built once per warm container; holds only config and the boto3 client.
    global _CONTROLLER
    if _CONTROLLER is not None:
        return _CONTROLLER

    cfg = SchedulerConfig.from_env()
    setup_logging(cfg.log_level, json_logs=cfg.log_json)
    _CONTROLLER = SchedulerController.from_config(cfg)
    return _CONTROLLER


def _request_id(context: Any) -> Optional[str]:
    return getattr(context, "aws_request_id", None)


def handler(event: Any, context: Any = None) -> Dict[str, Any]:
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=_request_id(context))

    try:
        controller = _controller_from_env()
    except Exception as exc:  # noqa: BLE001
        log.exception("scheduler_init_failed", error=str(exc))
        result = ScheduleResult.failure(f"Unexpected error: {exc}")
    else:
        result = controller.handle(event)

    log.info("schedule_invocation_finished", status_code=result.status_code, message=result.message)
    return result.to_response()
