from __future__ import annotations

import argparse
import dataclasses
import json
import sqlite3
import sys

from mdeploy.appfile import read_app
from mdeploy.client import MarathonClient
from mdeploy.deploy import deploy
from mdeploy.errors import AppFileError, DeployError
from mdeploy.events import EventLog, configure_logging
from mdeploy.settings import Settings


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _settings_from_args(args: argparse.Namespace) -> Settings:
    s = Settings.from_env()
    overrides = {}
    if args.host:
        overrides["marathon_host"] = args.host
    if args.events_db:
        overrides["events_db"] = args.events_db
    if args.cmd == "deploy":
        if args.file:
            overrides["app_file"] = args.file
        if args.wait:
            overrides["wait"] = True
        if args.timeout is not None:
            overrides["wait_timeout_s"] = args.timeout
    return dataclasses.replace(s, **overrides)


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Deploy a Marathon app definition")
    p.add_argument("--host", help="Marathon base URL (env MDEPLOY_MARATHON_HOST)")
    p.add_argument("--events-db", help="sqlite file to journal deploy events in (env MDEPLOY_EVENTS_DB)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log poll progress")
    sub = p.add_subparsers(dest="cmd", required=True)

    s_dep = sub.add_parser("deploy", help="Create or update the app, optionally wait for the rollout")
    s_dep.add_argument("--file", help="App definition JSON (default: marathon.json)")
    s_dep.add_argument("--wait", action="store_true", help="Wait until Marathon reports the deployment finished")
    s_dep.add_argument("--timeout", type=float, default=None, help="Seconds to wait before giving up (default 10)")

    s_ev = sub.add_parser("events", help="Show journaled deploy events")
    s_ev.add_argument("--limit", type=int, default=20)

    args = p.parse_args(argv)
    configure_logging(args.verbose)
    settings = _settings_from_args(args)

    if args.cmd == "events":
        try:
            rows = EventLog(settings.events_db).latest(args.limit)
        except (sqlite3.Error, OSError) as e:
            print(f"error: event journal {settings.events_db}: {e}", file=sys.stderr)
            return 1
        _print(rows)
        return 0

    if args.cmd == "deploy":
        if not settings.marathon_host:
            print("error: no Marathon host (use --host or MDEPLOY_MARATHON_HOST)", file=sys.stderr)
            return 2
        host = settings.marathon_host
        try:
            events = EventLog(settings.events_db, host=host)
        except (sqlite3.Error, OSError) as e:
            print(f"error: event journal {settings.events_db}: {e}", file=sys.stderr)
            return 1
        try:
            spec = read_app(settings.app_file)
            with MarathonClient(host, timeout_s=settings.http_timeout_s) as client:
                result = deploy(client, spec, host, settings.wait_config(), events=events, source=settings.app_file)
        except AppFileError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        except DeployError as e:
            events.log("ERROR", str(e), app_id=spec.id)
            print(f"error: {e}", file=sys.stderr)
            return 1
        _print(result.to_dict())
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
