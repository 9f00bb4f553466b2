from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional

from .config_utils import env_bool, env_csv, env_first, env_int, env_optional_str, env_pairs, env_str


@dataclass(frozen=True)
class SchedulerConfig:
    """Runtime configuration for the Dev/Test instance scheduler.

    AWS client:
    - SCHEDULER_AWS_REGION: region for the EC2 client (falls back to AWS_REGION,
      then to the boto3 default chain)
    - SCHEDULER_CONNECT_TIMEOUT_SECONDS: connect timeout (default: 5)
    - SCHEDULER_READ_TIMEOUT_SECONDS: read timeout (default: 20)

    Both timeouts together must stay below the Lambda timeout (30s), so a hung
    endpoint is reported as a failure instead of killing the invocation.

    Idempotency:
    - SCHEDULER_ALREADY_IN_STATE_CODES: comma separated provider error codes that
      mean "already in the requested state" (default: IncorrectInstanceState)

    Logging:
    - SCHEDULER_LOG_LEVEL (default: INFO)
    - SCHEDULER_LOG_JSON: JSON lines when true, console rendering otherwise

    Schedule:
    - DEVTEST_INSTANCE_ID: the instance the trigger rules target
    - SCHEDULER_START_SCHEDULE (default: cron(0 8 ? * MON-FRI *), 9 AM BST)
    - SCHEDULER_STOP_SCHEDULE (default: cron(0 17 ? * MON-FRI *), 6 PM BST)
    - SCHEDULER_EXPECTED_TAGS: tags the scheduled instance is expected to carry
      (default: Environment=Development,AutoSchedule=True)

    MCP server:
    - SCHEDULER_MCP_TRANSPORT: stdio|http|sse (default: stdio)
    - SCHEDULER_MCP_HOST (default: 0.0.0.0)
    - SCHEDULER_MCP_PORT (default: 8020)
    """

    aws_region: Optional[str]
    connect_timeout_seconds: int
    read_timeout_seconds: int
    already_in_state_codes: FrozenSet[str]

    log_level: str
    log_json: bool

    devtest_instance_id: Optional[str]
    start_schedule: str
    stop_schedule: str
    expected_tags: Dict[str, str] = field(default_factory=dict)

    mcp_transport: str = "stdio"
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 8020

    DEFAULT_CONNECT_TIMEOUT_SECONDS = 5
    DEFAULT_READ_TIMEOUT_SECONDS = 20
    DEFAULT_ALREADY_IN_STATE_CODES = ("IncorrectInstanceState",)
    DEFAULT_LOG_LEVEL = "INFO"
    DEFAULT_START_SCHEDULE = "cron(0 8 ? * MON-FRI *)"
    DEFAULT_STOP_SCHEDULE = "cron(0 17 ? * MON-FRI *)"
    DEFAULT_EXPECTED_TAGS = (("Environment", "Development"), ("AutoSchedule", "True"))
    DEFAULT_MCP_TRANSPORT = "stdio"
    DEFAULT_MCP_HOST = "0.0.0.0"
    DEFAULT_MCP_PORT = 8020

    @classmethod
    def from_env(cls) -> "SchedulerConfig":
        codes = env_csv("SCHEDULER_ALREADY_IN_STATE_CODES", list(cls.DEFAULT_ALREADY_IN_STATE_CODES))

        return cls(
            aws_region=env_first("SCHEDULER_AWS_REGION", "AWS_REGION"),
            connect_timeout_seconds=env_int(
                "SCHEDULER_CONNECT_TIMEOUT_SECONDS", cls.DEFAULT_CONNECT_TIMEOUT_SECONDS, minimum=1
            ),
            read_timeout_seconds=env_int(
                "SCHEDULER_READ_TIMEOUT_SECONDS", cls.DEFAULT_READ_TIMEOUT_SECONDS, minimum=1
            ),
            already_in_state_codes=frozenset(codes),
            log_level=env_str("SCHEDULER_LOG_LEVEL", cls.DEFAULT_LOG_LEVEL).upper(),
            log_json=env_bool("SCHEDULER_LOG_JSON", True),
            devtest_instance_id=env_optional_str("DEVTEST_INSTANCE_ID"),
            start_schedule=env_str("SCHEDULER_START_SCHEDULE", cls.DEFAULT_START_SCHEDULE),
            stop_schedule=env_str("SCHEDULER_STOP_SCHEDULE", cls.DEFAULT_STOP_SCHEDULE),
            expected_tags=env_pairs("SCHEDULER_EXPECTED_TAGS", dict(cls.DEFAULT_EXPECTED_TAGS)),
            mcp_transport=env_str("SCHEDULER_MCP_TRANSPORT", cls.DEFAULT_MCP_TRANSPORT).lower(),
            mcp_host=env_str("SCHEDULER_MCP_HOST", cls.DEFAULT_MCP_HOST),
            mcp_port=env_int("SCHEDULER_MCP_PORT", cls.DEFAULT_MCP_PORT, minimum=1),
        )
