"""Deploy tracker history CLI."""

from __future__ import annotations

import argparse
import json

from deploy_tracker.config import DeployTrackerSettings
from deploy_tracker.dashboard import MALFORMED_SINCE_MESSAGE, parse_rfc3339, render_report
from deploy_tracker.deploy import ChannelDeploys
from deploy_tracker.storage import ChromaUnavailableError, DeployLog, open_deploy_log
from deploy_tracker.tools import NOBODY_DEPLOYING_MESSAGE, current_message


def load_store(settings: DeployTrackerSettings) -> DeployLog:
    try:
        return open_deploy_log(settings)
    except ChromaUnavailableError as exc:
        print(f"Storage unavailable: {exc}")
        raise SystemExit(1)


def cmd_history(args: argparse.Namespace) -> None:
    timestamp = None
    if args.since:
        try:
            timestamp = parse_rfc3339(args.since)
        except ValueError:
            print(MALFORMED_SINCE_MESSAGE)
            raise SystemExit(2)

    settings = DeployTrackerSettings()
    store = load_store(settings)
    if timestamp is None:
        deploys = store.all(args.channel)
    else:
        deploys = store.since(args.channel, timestamp)
    print(render_report(deploys), end="")


def cmd_current(args: argparse.Namespace) -> None:
    settings = DeployTrackerSettings()
    tracker = ChannelDeploys(load_store(settings))
    deploy, in_progress = tracker.current(args.channel)

    if args.json:
        payload = {
            "channel_id": args.channel,
            "in_progress": in_progress,
            "deploy": deploy.to_payload() if deploy is not None else None,
        }
        print(json.dumps(payload, indent=2))
    elif in_progress:
        print(current_message(deploy))
    else:
        print(NOBODY_DEPLOYING_MESSAGE)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Deploy tracker history")
    sub = parser.add_subparsers(dest="cmd")

    p_history = sub.add_parser("history", help="Render a channel's deploy history")
    p_history.add_argument("channel")
    p_history.add_argument("--since", help="Only deploys started at or after this RFC 3339 time")
    p_history.set_defaults(func=cmd_history)

    p_current = sub.add_parser("current", help="Show the channel's latest deploy")
    p_current.add_argument("channel")
    p_current.add_argument("--json", action="store_true", help="Output JSON")
    p_current.set_defaults(func=cmd_current)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
