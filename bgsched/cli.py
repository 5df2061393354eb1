#!/usr/bin/env python3
"""
bgsched Command-Line Interface.

Runs importable zero-argument callables on a schedule inside a single
foreground process:

    bgsched run --job cleanup myapp.tasks:cleanup --interval 5
"""

import argparse
import importlib
import json
import sys
from typing import Callable

from decologr import Logger as log

from bgsched.core.scheduler import JobScheduler
from bgsched.core.service import SchedulerService

def resolve_target(target: str) -> Callable:
    """
    Import a callable from a ``module:attr`` (or ``module.attr``) reference.

    :param target: Import reference
    :return: The callable
    """
    if ":" in target:
        module_name, _, attr_path = target.partition(":")
    else:
        module_name, _, attr_path = target.rpartition(".")
    if not module_name or not attr_path:
        raise ValueError(f"Invalid job target {target!r}, expected module:attr")

    obj = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)

    if not callable(obj):
        raise TypeError(f"Job target {target!r} is not callable")
    return obj

def run_jobs(args):
    """Run the given jobs under the scheduler service."""
    if not args.job:
        print("Error: at least one --job NAME TARGET must be provided", file=sys.stderr)
        sys.exit(1)

    scheduler = JobScheduler(tick_seconds=args.tick_seconds)
    for name, target in args.job:
        work = resolve_target(target)
        scheduler.add_job(
            name,
            work,
            repeat=not args.once,
            start=args.delay,
            interval=args.interval,
        )
        log.debug(f"Queued {name} -> {target}")

    service = SchedulerService(scheduler=scheduler, duration=args.duration)
    service.start()

    if args.json:
        print(json.dumps(service.final_status or service.status(), indent=2, default=str))
    return service

def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="bgsched - in-process background job scheduler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    run_parser = subparsers.add_parser("run", help="Run jobs in the foreground")
    run_parser.add_argument(
        "--job",
        "-j",
        nargs=2,
        action="append",
        metavar=("NAME", "TARGET"),
        help="Job name and module:attr of a zero-argument callable (repeatable)",
    )
    run_parser.add_argument("--once", action="store_true", help="Run each job once instead of repeating")
    run_parser.add_argument("--interval", "-i", type=int, default=0, help="Minutes between runs")
    run_parser.add_argument("--delay", "-d", type=int, default=0, help="Minutes before the first run")
    run_parser.add_argument("--tick-seconds", "-t", type=float, help="Seconds between queue scans")
    run_parser.add_argument("--duration", type=float, help="Stop after this many seconds")
    run_parser.add_argument("--json", action="store_true", help="Print final status as JSON")
    run_parser.set_defaults(func=run_jobs)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except Exception as ex:
        print(f"Error: {ex}", file=sys.stderr)
        if getattr(args, "json", False):
            print(json.dumps({"error": str(ex)}, indent=2))
        sys.exit(1)

if __name__ == "__main__":
    main()
