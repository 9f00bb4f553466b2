from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

import structlog

from .config import SchedulerConfig
from .controller import SchedulerController
from .errors import ConfigError
from .logging_conf import setup_logging
from .mcp import instance_status_impl, run_stdio
from .models import ScheduleResult
from .provider import ComputeProvider, Ec2ComputeProvider
from .rules import build_schedule_rules

log = structlog.get_logger(__name__)


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def _build_provider(cfg: SchedulerConfig) -> ComputeProvider:
    return Ec2ComputeProvider.from_config(cfg)


def _cmd_invoke(args: argparse.Namespace, cfg: SchedulerConfig) -> int:
    # Same path as the Lambda trigger, so a manual override obeys the same rules.
    try:
        controller = SchedulerController.from_config(cfg, provider=_build_provider(cfg))
    except Exception as exc:  # noqa: BLE001
        log.exception("scheduler_init_failed", error=str(exc))
        result = ScheduleResult.failure(f"Unexpected error: {exc}")
    else:
        payload = {"action": args.action, "instance_id": args.instance_id or cfg.devtest_instance_id}
        result = controller.handle(payload)
    _print_json(result.to_response())
    return 0 if result.ok else 1


def _cmd_status(args: argparse.Namespace, cfg: SchedulerConfig) -> int:
    target = args.instance_id or cfg.devtest_instance_id
    if not target:
        raise ConfigError("No instance id: pass --instance-id or set DEVTEST_INSTANCE_ID.")
    try:
        provider = _build_provider(cfg)
    except Exception as exc:  # noqa: BLE001
        log.exception("scheduler_init_failed", error=str(exc))
        status: Dict[str, Any] = {"ok": False, "error": f"Unexpected error: {exc}"}
    else:
        status = instance_status_impl(provider, target, cfg.expected_tags)
    _print_json(status)
    return 0 if status.get("ok") else 1


def _cmd_rules(args: argparse.Namespace, cfg: SchedulerConfig) -> int:
    rules = build_schedule_rules(cfg, args.instance_id)
    _print_json([r.to_dict() for r in rules])
    return 0


def _cmd_mcp(args: argparse.Namespace, cfg: SchedulerConfig) -> int:
    run_stdio()
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="devtest-scheduler",
        description="Start/stop the Dev/Test instance on demand and inspect its schedule",
    )
    sub = p.add_subparsers(dest="command", required=True)

    invoke = sub.add_parser("invoke", help="Run one start/stop exactly as the scheduled trigger would")
    invoke.add_argument("--action", required=True, help="start or stop")
    invoke.add_argument("--instance-id", default=None, help="defaults to DEVTEST_INSTANCE_ID")
    invoke.set_defaults(func=_cmd_invoke)

    status = sub.add_parser("status", help="Show instance state and scheduling tags")
    status.add_argument("--instance-id", default=None, help="defaults to DEVTEST_INSTANCE_ID")
    status.set_defaults(func=_cmd_status)

    rules = sub.add_parser("rules", help="Print the start/stop trigger rules as JSON")
    rules.add_argument("--instance-id", default=None, help="defaults to DEVTEST_INSTANCE_ID")
    rules.set_defaults(func=_cmd_rules)

    server = sub.add_parser("mcp", help="Run the MCP server")
    server.set_defaults(func=_cmd_mcp)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = SchedulerConfig.from_env()
    setup_logging(cfg.log_level, json_logs=cfg.log_json)

    try:
        return int(args.func(args, cfg))
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
