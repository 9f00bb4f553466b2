"""Scheduler controller.

Turns one trigger payload into at most one start/stop request against the
compute provider and always answers with a ``ScheduleResult``:

- 400 when the payload is rejected (no provider call is made)
- 200 when the transition was accepted, or the instance was already there
- 500 when the provider rejected the call or something unexpected failed

The trigger fires on a fixed cadence regardless of the instance's real state
(holidays, manual overrides), so "already in the requested state" is the
common case and is reported as success.
"""

from __future__ import annotations

from typing import Any, FrozenSet, Iterable, Optional

import structlog

from .config import SchedulerConfig
from .errors import ProviderError, ValidationError
from .models import Action, InstanceTransition, ScheduleRequest, ScheduleResult
from .provider import ComputeProvider, Ec2ComputeProvider

log = structlog.get_logger(__name__)


class SchedulerController:
    def __init__(
        self,
        provider: ComputeProvider,
        *,
        already_in_state_codes: Iterable[str] = SchedulerConfig.DEFAULT_ALREADY_IN_STATE_CODES,
    ) -> None:
        self._provider = provider
        self._already_codes: FrozenSet[str] = frozenset(already_in_state_codes)

    @classmethod
    def from_config(
        cls, cfg: SchedulerConfig, provider: Optional[ComputeProvider] = None
    ) -> "SchedulerController":
        return cls(
            provider if provider is not None else Ec2ComputeProvider.from_config(cfg),
            already_in_state_codes=cfg.already_in_state_codes,
        )

    @property
    def provider(self) -> ComputeProvider:
        return self._provider

    def validate(self, payload: Any) -> ScheduleRequest:
        return ScheduleRequest.from_payload(payload)

    def execute(self, request: ScheduleRequest) -> ScheduleResult:
        """Issue the single provider call for ``request`` and classify the outcome."""

        bound = log.bind(instance_id=request.instance_id, action=request.action.value)
        bound.info("instance_transition_requested")

        try:
            transition = self._dispatch(request)
        except ProviderError as exc:
            if exc.code in self._already_codes:
                bound.warning("instance_already_in_target_state", error_code=exc.code)
                return _already(request)
            bound.error("provider_rejected_transition", error_code=exc.code, error=str(exc))
            return ScheduleResult.failure(f"Compute provider error: {exc}")

        bound.info("instance_transition_response", **transition.to_dict())
        if transition.previous_state == request.action.target_state:
            bound.warning("instance_already_in_target_state", previous_state=transition.previous_state)
            return _already(request)

        return ScheduleResult.success(
            f"Successfully initiated {request.action.value} for instance {request.instance_id}."
        )

    def handle(self, payload: Any) -> ScheduleResult:
        """Validate and execute one payload. Never raises."""

        try:
            request = self.validate(payload)
            return self.execute(request)
        except ValidationError as exc:
            log.error("schedule_request_rejected", reason=type(exc).__name__, error=str(exc))
            return ScheduleResult.invalid(str(exc))
        except Exception as exc:  # noqa: BLE001
            log.exception("schedule_request_unexpected_error", error=str(exc))
            return ScheduleResult.failure(f"Unexpected error: {exc}")

    def _dispatch(self, request: ScheduleRequest) -> InstanceTransition:
        if request.action is Action.START:
            return self._provider.start(request.instance_id)
        return self._provider.stop(request.instance_id)


def _already(request: ScheduleRequest) -> ScheduleResult:
    return ScheduleResult.success(
        f"Instance {request.instance_id} is already {request.action.past_tense}."
    )
