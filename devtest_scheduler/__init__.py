"""Dev/Test instance scheduler.

Starts and stops the non-production WordPress EC2 instance on a schedule:
- controller.py: validation and the start/stop idempotency rules
- provider.py: compute provider port and the boto3 EC2 adapter
- handler.py: AWS Lambda entrypoint invoked by the EventBridge rules
- rules.py, cli.py, mcp.py: schedule description and operator surfaces
"""

from .controller import SchedulerController
from .errors import ConfigError, InvalidAction, MissingInstanceId, ProviderError, ValidationError
from .models import Action, ScheduleRequest, ScheduleResult

__all__ = [
    "Action",
    "ConfigError",
    "InvalidAction",
    "MissingInstanceId",
    "ProviderError",
    "ScheduleRequest",
    "ScheduleResult",
    "SchedulerController",
    "ValidationError",
]
