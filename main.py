#!/usr/bin/env python3
"""ios-sim-mcp CLI - drive the simulator operations by hand.

Usage:
    python main.py --list
    python main.py --describe
    python main.py --tap-text "Sign In" --type-text "hello" --screenshot _artifacts/
    python main.py --backend desktop --tap 200 400
"""

import argparse
import json
import sys
from dataclasses import replace

from simbridge import config, screen_mapper, screenshot
from simbridge.controller import SimulatorController, build_controller
from simbridge.errors import SimulatorError


def log(msg: str) -> None:
    print(f"[main] {msg}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ios-sim-mcp - iOS Simulator control via idb or simctl + cliclick"
    )
    parser.add_argument(
        "--backend",
        choices=config.BACKENDS,
        help="Override SIM_BACKEND for this run",
    )
    parser.add_argument(
        "--udid",
        default="",
        help="Target simulator UDID (default: the booted simulator)",
    )
    parser.add_argument("--list", action="store_true", help="List simulators as JSON")
    parser.add_argument("--boot", metavar="UDID", help="Boot a simulator")
    parser.add_argument("--shutdown", metavar="UDID", help="Shut down a simulator")
    parser.add_argument(
        "--describe",
        action="store_true",
        help="Dump the accessibility elements as JSON",
    )
    parser.add_argument("--find", metavar="LABEL", help="Find elements whose label contains LABEL")
    parser.add_argument("--tap-text", metavar="LABEL", help="Tap the first element matching LABEL")
    parser.add_argument("--tap", nargs=2, type=float, metavar=("X", "Y"), help="Tap at coordinates")
    parser.add_argument("--type-text", metavar="TEXT", help="Type into the focused field")
    parser.add_argument(
        "--screenshot",
        metavar="PATH",
        help="Save a screenshot to PATH (a directory gets a timestamped name)",
    )
    parser.add_argument("--screen-size", action="store_true", help="Print the screen size as JSON")
    return parser


def run(args: argparse.Namespace, controller: SimulatorController) -> None:
    """Execute the requested actions in a fixed order, printing results."""
    udid = args.udid or None

    if args.list:
        print(json.dumps([s.to_dict() for s in controller.list_simulators()], indent=2))
    if args.boot:
        print(controller.boot_simulator(args.boot))
    if args.shutdown:
        print(controller.shutdown_simulator(args.shutdown))
    if args.describe:
        print(screen_mapper.dump_json(controller.describe_screen(udid)))
    if args.find:
        print(screen_mapper.dump_json(controller.find_elements(args.find, udid)))
    if args.tap_text:
        print(controller.tap_element(args.tap_text, udid))
    if args.tap:
        print(controller.tap(args.tap[0], args.tap[1], udid))
    if args.type_text:
        print(controller.type_text(args.type_text, udid))
    if args.screen_size:
        print(json.dumps(controller.get_screen_size(udid).to_dict(), indent=2))
    if args.screenshot:
        path = screenshot.save_png(controller.screenshot(udid), args.screenshot)
        print(path)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    actions = [
        args.list, args.boot, args.shutdown, args.describe, args.find,
        args.tap_text, args.tap, args.type_text, args.screen_size, args.screenshot,
    ]
    if not any(actions):
        parser.print_help()
        return 1

    try:
        config.load_env_files()
        cfg = config.load_config()
        if args.backend:
            cfg = replace(cfg, backend=args.backend)
        log(f"Backend: {cfg.backend}")
        run(args, build_controller(cfg))
    except SimulatorError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
