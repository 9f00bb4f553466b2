from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidAction, InvalidPayload, MissingInstanceId


class Action(str, Enum):
    START = "start"
    STOP = "stop"

    @property
    def target_state(self) -> str:
        """Provider state the instance ends up in once the action completes."""

        return "running" if self is Action.START else "stopped"

    @property
    def past_tense(self) -> str:
        return "started" if self is Action.START else "stopped"


@dataclass(frozen=True)
class ScheduleRequest:
    action: Action
    instance_id: str

    @classmethod
    def from_payload(cls, payload: Any) -> "ScheduleRequest":
        """Parse a trigger payload into a request.

        Accepts a mapping or a JSON object encoded as a string. The instance id
        is checked before the action, so a payload missing both reports the
        missing id.
        """

        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except ValueError:
                raise InvalidPayload() from None
        if not isinstance(payload, Mapping):
            raise InvalidPayload()

        instance_id = payload.get("instance_id")
        if not isinstance(instance_id, str) or not instance_id.strip():
            raise MissingInstanceId()

        raw_action = payload.get("action")
        try:
            action = Action(raw_action)
        except ValueError:
            raise InvalidAction(raw_action) from None

        return cls(action=action, instance_id=instance_id.strip())

    def to_payload(self) -> Dict[str, str]:
        return {"action": self.action.value, "instance_id": self.instance_id}


@dataclass(frozen=True)
class ScheduleResult:
    status_code: int
    message: str

    @classmethod
    def success(cls, message: str) -> "ScheduleResult":
        return cls(status_code=int(HTTPStatus.OK), message=message)

    @classmethod
    def invalid(cls, message: str) -> "ScheduleResult":
        return cls(status_code=int(HTTPStatus.BAD_REQUEST), message=message)

    @classmethod
    def failure(cls, message: str) -> "ScheduleResult":
        return cls(status_code=int(HTTPStatus.INTERNAL_SERVER_ERROR), message=message)

    @property
    def ok(self) -> bool:
        return self.status_code == HTTPStatus.OK

    def to_response(self) -> Dict[str, Any]:
        # Lambda proxy convention: body carries a JSON-encoded string.
        return {"statusCode": self.status_code, "body": json.dumps(self.message)}


@dataclass(frozen=True)
class InstanceTransition:
    instance_id: str
    previous_state: Optional[str]
    current_state: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instance_id": self.instance_id,
            "previous_state": self.previous_state,
            "current_state": self.current_state,
        }


@dataclass(frozen=True)
class InstanceStatus:
    instance_id: str
    state: Optional[str]
    tags: Dict[str, str] = field(default_factory=dict)

    def missing_tags(self, expected: Mapping[str, str]) -> Dict[str, str]:
        """Expected tags the instance does not carry with the expected value."""

        return {k: v for k, v in expected.items() if self.tags.get(k) != v}

    def to_dict(self) -> Dict[str, Any]:
        return {"instance_id": self.instance_id, "state": self.state, "tags": dict(self.tags)}
