from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import SchedulerConfig
from .errors import ConfigError
from .models import Action, ScheduleRequest

_SCHEDULE_EXPRESSION = re.compile(r"^(cron|rate)\(\s*\S.*\)$")


@dataclass(frozen=True)
class ScheduleRule:
    """One EventBridge rule targeting the scheduler with a fixed payload."""

    name: str
    description: str
    schedule_expression: str
    request: ScheduleRequest

    def input_json(self) -> str:
        return json.dumps(self.request.to_payload())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "schedule_expression": self.schedule_expression,
            "state": "ENABLED",
            "input": self.request.to_payload(),
        }


def validate_schedule_expression(expression: str) -> str:
    expr = (expression or "").strip()
    if not _SCHEDULE_EXPRESSION.match(expr):
        raise ConfigError(f"Invalid schedule expression {expression!r}: expected cron(...) or rate(...)")
    return expr


def build_schedule_rules(cfg: SchedulerConfig, instance_id: Optional[str] = None) -> List[ScheduleRule]:
    """Describe the start and stop rules for the Dev/Test instance."""

    target = (instance_id or cfg.devtest_instance_id or "").strip()
    if not target:
        raise ConfigError("No instance id: pass one explicitly or set DEVTEST_INSTANCE_ID.")

    return [
        ScheduleRule(
            name="StartDevTestInstanceRule",
            description="Start the Dev/Test WordPress instance during business hours.",
            schedule_expression=validate_schedule_expression(cfg.start_schedule),
            request=ScheduleRequest(action=Action.START, instance_id=target),
        ),
        ScheduleRule(
            name="StopDevTestInstanceRule",
            description="Stop the Dev/Test WordPress instance outside business hours.",
            schedule_expression=validate_schedule_expression(cfg.stop_schedule),
            request=ScheduleRequest(action=Action.STOP, instance_id=target),
        ),
    ]
