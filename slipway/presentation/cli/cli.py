"""
CLI Module

Architectural Intent:
- Command-line interface for Slipway
- Entry point for all user interactions
- Delegates to application use cases via composition root
- Supports --verbose/--debug flags for log level control
"""

import argparse
import sys
import asyncio
import logging
import traceback
from dataclasses import replace
from slipway import composition_root
from slipway.application.use_cases.deploy_fleet import DEPLOY_SEQUENCE
from slipway.application.use_cases.rollback_deployment import ROLLBACK_SEQUENCE
from slipway.domain.errors import SlipwayError
from slipway.infrastructure.config import DEFAULT_CONFIG_FILE, load_config
from slipway.infrastructure.logging import configure_logging, level_from_name

TASK_NAMES = sorted(set(DEPLOY_SEQUENCE) | set(ROLLBACK_SEQUENCE))


def _fail(label: str, error: BaseException, verbose: bool) -> None:
    print(f"[-] {label} Failed: {error}")
    if verbose:
        traceback.print_exc()
    sys.exit(1)


async def _show_status(container) -> None:
    store = container.release_store
    nodes = container.nodes
    state = await store.inspect_state(nodes)
    releases = await store.list_releases(nodes)

    print(f"[*] Fleet: {', '.join(str(n) for n in nodes)}")
    print(f"[*] State: {state.status.name}")
    print(f"[*] Current: {state.current or '-'}")
    print(f"[*] Upcoming: {state.upcoming or '-'}")
    print(f"[*] Releases ({len(releases)}):")
    for name in releases:
        marker = "*" if name == state.current else " "
        print(f"  {marker} {name}")


async def async_main():
    parser = argparse.ArgumentParser(
        description="Slipway: atomic, rollback-capable releases across a fleet"
    )
    parser.add_argument(
        "--config", "-c", default=DEFAULT_CONFIG_FILE, help="Path to JSON config"
    )
    parser.add_argument(
        "--targets", "-t", help="Comma-separated list of targets (overrides config)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--log-json", action="store_true", help="Emit structured JSON logs"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "deploy", help="Stage a new release, publish it and prune old ones"
    )
    subparsers.add_parser(
        "rollback", help="Publish the release preceding the current one"
    )
    subparsers.add_parser("status", help="Show the fleet's release state")
    task_parser = subparsers.add_parser("task", help="Run a single named step")
    task_parser.add_argument("name", choices=TASK_NAMES, help="Step to run")

    args = parser.parse_args()

    config = load_config(args.config)
    if args.targets:
        targets = tuple(t.strip() for t in args.targets.split(",") if t.strip())
        config = replace(config, fleet=replace(config.fleet, targets=targets))

    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = level_from_name(config.log_level)
    configure_logging(level=level, json_format=args.log_json)

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help()
        return

    try:
        container = composition_root.create_container(config)
    except SlipwayError as e:
        print(f"[-] Configuration error: {e}")
        sys.exit(1)

    try:
        await _run_command(args, container, verbose)
    finally:
        container.telemetry.shutdown()


async def _run_command(args, container, verbose: bool) -> None:
    if args.command == "deploy":
        targets = [str(n) for n in container.nodes]
        print(f"[*] Deploying to fleet: {targets}...")
        try:
            results = await container.deploy.execute()
        except Exception as e:
            _fail("Deployment", e, verbose)
            return
        print(f"[+] Deployment Successful: {results['deploy:update'].name} is live.")
        return

    if args.command == "rollback":
        targets = [str(n) for n in container.nodes]
        print(f"[*] Initiating rollback on {targets}...")
        try:
            results = await container.rollback.execute()
        except Exception as e:
            _fail("Rollback", e, verbose)
            return
        print(f"[+] Rollback Successful: {results['rollback:prepare']} is live.")
        return

    if args.command == "status":
        if not container.nodes:
            print("[-] No fleet targets defined.")
            sys.exit(1)
        try:
            await _show_status(container)
        except Exception as e:
            _fail("Status", e, verbose)
        return

    if args.command == "task":
        print(f"[*] Running {args.name}...")
        try:
            await container.tasks[args.name].execute()
        except Exception as e:
            _fail(args.name, e, verbose)
            return
        print(f"[+] {args.name} done.")
        return


def main():
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
