from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .config import SchedulerConfig
from .errors import ProviderError
from .models import InstanceStatus, InstanceTransition


class ComputeProvider(Protocol):
    """The compute operations the scheduler depends on."""

    def start(self, instance_id: str) -> InstanceTransition: ...

    def stop(self, instance_id: str) -> InstanceTransition: ...

    def describe(self, instance_id: str) -> InstanceStatus: ...


def build_ec2_client(cfg: SchedulerConfig) -> Any:
    """Create the EC2 client used by the scheduler.

    This is the single place where the boto3 client is built, so the provider
    stays injectable. SDK retries are disabled: one attempt per invocation, the
    trigger re-fires on its own cadence.
    """

    client_config = Config(
        connect_timeout=int(cfg.connect_timeout_seconds),
        read_timeout=int(cfg.read_timeout_seconds),
        retries={"total_max_attempts": 1, "mode": "standard"},
    )
    kwargs: Dict[str, Any] = {"config": client_config}
    if cfg.aws_region:
        kwargs["region_name"] = cfg.aws_region
    return boto3.client("ec2", **kwargs)


def _error_from_client_error(exc: ClientError, operation: str) -> ProviderError:
    error = exc.response.get("Error", {}) or {}
    code = str(error.get("Code") or "Unknown")
    return ProviderError(code, str(exc), operation=operation)


def _error_from_botocore(exc: BotoCoreError, operation: str) -> ProviderError:
    # Timeouts and unreachable endpoints carry no service error code.
    return ProviderError(type(exc).__name__, str(exc), operation=operation)


def _state_name(entry: Dict[str, Any], key: str) -> Optional[str]:
    state = entry.get(key) or {}
    name = state.get("Name")
    return str(name) if name else None


def _transition_from(entries: List[Dict[str, Any]], instance_id: str) -> InstanceTransition:
    for entry in entries or []:
        if entry.get("InstanceId") == instance_id:
            return InstanceTransition(
                instance_id=instance_id,
                previous_state=_state_name(entry, "PreviousState"),
                current_state=_state_name(entry, "CurrentState"),
            )
    return InstanceTransition(instance_id=instance_id, previous_state=None, current_state=None)


class Ec2ComputeProvider:
    """EC2-backed compute provider.

    Translates botocore exceptions into ``ProviderError`` at this seam so the
    controller never sees SDK types.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_config(cls, cfg: SchedulerConfig) -> "Ec2ComputeProvider":
        return cls(build_ec2_client(cfg))

    def _call(self, operation: str, **kwargs: Any) -> Dict[str, Any]:
        method = getattr(self._client, operation)
        try:
            return method(**kwargs)
        except ClientError as exc:
            raise _error_from_client_error(exc, operation) from exc
        except BotoCoreError as exc:
            raise _error_from_botocore(exc, operation) from exc

    def start(self, instance_id: str) -> InstanceTransition:
        resp = self._call("start_instances", InstanceIds=[instance_id])
        return _transition_from(resp.get("StartingInstances", []), instance_id)

    def stop(self, instance_id: str) -> InstanceTransition:
        resp = self._call("stop_instances", InstanceIds=[instance_id])
        return _transition_from(resp.get("StoppingInstances", []), instance_id)

    def describe(self, instance_id: str) -> InstanceStatus:
        resp = self._call("describe_instances", InstanceIds=[instance_id])
        for reservation in resp.get("Reservations", []) or []:
            for inst in reservation.get("Instances", []) or []:
                if inst.get("InstanceId") != instance_id:
                    continue
                tags = {
                    str(t.get("Key")): str(t.get("Value", ""))
                    for t in inst.get("Tags", []) or []
                    if t.get("Key")
                }
                return InstanceStatus(instance_id=instance_id, state=_state_name(inst, "State"), tags=tags)

        raise ProviderError(
            "InvalidInstanceID.NotFound",
            f"The instance ID '{instance_id}' does not exist",
            operation="describe_instances",
        )
