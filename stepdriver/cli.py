# stepdriver/cli.py
"""
@file cli.py
@brief Command-line interface: run, validate and list-actions.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .actionlogger import ACTION_LOGGER
from .config import Settings
from .exceptions import ConfigurationError
from .registry import build_registry
from .runner import summarize
from .steps import DEFAULT_SCHEMA, StepSource
from .timinglogger import TIMING_LOGGER
from .timings import list_presets

_TRUTHY = {"1", "true", "yes", "on"}


def _configure_action_logger_from_env() -> None:
    """Configure action logging from environment variables."""
    if os.getenv("STEPDRIVER_ACTION_LOGGING", "").lower() not in _TRUTHY:
        ACTION_LOGGER.disable()
        return
    ACTION_LOGGER.configure(
        console=True,
        file_path=os.getenv("STEPDRIVER_ACTION_LOG_FILE"),
        level=os.getenv("STEPDRIVER_ACTION_LOG_LEVEL", "INFO"),
        format=os.getenv("STEPDRIVER_ACTION_LOG_FORMAT", "line"),
    )
    ACTION_LOGGER.enable()


def _configure_timing_logger_from_env() -> None:
    """Configure timing logging from environment variables."""
    if os.getenv("STEPDRIVER_TIMING_LOGGING", "").lower() not in _TRUTHY:
        TIMING_LOGGER.disable()
        return
    TIMING_LOGGER.configure(console=True, file_path=os.getenv("STEPDRIVER_TIMING_LOG_FILE"))
    TIMING_LOGGER.enable()


def _parse_vars(pairs: Optional[List[str]]) -> Dict[str, Any]:
    variables: Dict[str, Any] = {}
    for spec in pairs or []:
        if "=" in spec:
            key, value = spec.split("=", 1)
            variables[key.strip()] = value.strip()
    return variables


def _resolve_preset(args: argparse.Namespace) -> str:
    if args.ci:
        return "ci"
    if args.fast:
        return "fast"
    if args.slow:
        return "slow"
    return "default"


def _build_settings(args: argparse.Namespace) -> Settings:
    overrides: Dict[str, Any] = {}
    if args.find_wait is not None:
        overrides["find_wait"] = args.find_wait
    if args.no_retry:
        overrides["retry_enabled"] = False
    if args.image_dir:
        overrides["image_dir"] = os.path.abspath(args.image_dir)
    preset = _resolve_preset(args)
    if args.settings:
        return Settings.load(args.settings, preset=preset, overrides=overrides)
    return Settings.build(preset=preset, overrides=overrides)


def _print_report(report: Dict[str, Any], verbose: bool) -> None:
    print("\n" + "=" * 60)
    print(f"Run:      {report['run_id']}")
    print(f"Status:   {report['status'].upper()}")
    print(f"Duration: {report.get('duration_sec', 0):.2f}s")
    if verbose or report["status"] != "passed":
        print("\nSteps:")
        for step in report["steps"]:
            icon = "+" if step["status"] == "passed" else "X"
            retry = " (retried)" if step["retried"] else ""
            print(f"  {icon} [{step['index']}] {step['action']}: {step['label']}{retry}")
            if step.get("error"):
                print(f"      {step['error']}")
    for err in report.get("errors", []):
        print(f"Error: {err}")


def _cmd_run(args: argparse.Namespace) -> int:
    try:
        settings = _build_settings(args)
        steps = StepSource(args.schema).load(args.steps, _parse_vars(args.var))
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    logging.getLogger("stepdriver").debug("Settings: %s", settings.to_dict())

    # Windows-only seams are imported here so validate/list-actions work anywhere.
    from .engine import build_engine
    from .screen import DesktopScreen
    from .session import DesktopSession
    from .uia import UIADesktop

    engine = build_engine(settings, DesktopSession(), DesktopScreen(), UIADesktop())
    try:
        report = engine.dispatcher.run(steps)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _print_report(report, args.verbose)
    if args.report:
        os.makedirs(os.path.dirname(os.path.abspath(args.report)) or ".", exist_ok=True)
        with open(args.report, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        print(f"Report:   {args.report}")
    summary = summarize([report])
    return 0 if summary["failed"] == 0 else 2


def _cmd_validate(args: argparse.Namespace) -> int:
    try:
        steps = StepSource(args.schema).load(args.steps, _parse_vars(args.var))
        build_registry().validate(steps)
        if args.settings:
            Settings.load(args.settings)
    except ConfigurationError as e:
        print(f"INVALID {args.steps}\n{e}", file=sys.stderr)
        return 1
    print(f"VALID {args.steps} ({len(steps)} steps)")
    return 0


def _cmd_list_actions(args: argparse.Namespace) -> int:
    arities: Dict[str, List[int]] = {}
    for descriptor in build_registry().descriptors():
        arities.setdefault(descriptor.name, []).append(descriptor.arity)
    for name, counts in arities.items():
        print(f"{name:<24} args: {'/'.join(str(a) for a in counts)}")
    print("\nTiming presets:")
    for preset, description in list_presets().items():
        print(f"  {preset:<8} {description}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = argv if argv is not None else sys.argv[1:]
    logging.basicConfig(level=os.getenv("STEPDRIVER_LOG_LEVEL", "WARNING").upper())
    _configure_action_logger_from_env()
    _configure_timing_logger_from_env()

    p = argparse.ArgumentParser(
        prog="stepdriver",
        description="stepdriver - desktop GUI automation from step lists",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    runp = sub.add_parser("run", help="Run a YAML step list against the desktop")
    runp.add_argument("--steps", "-s", required=True, help="Path to the step list YAML")
    runp.add_argument("--settings", "-c", default=None, help="Optional settings YAML")
    runp.add_argument("--schema", default=DEFAULT_SCHEMA, help="Path to step list JSON schema")
    runp.add_argument("--var", "-v", action="append", help="Variable in KEY=VALUE format (repeatable)")
    runp.add_argument("--report", "-r", default=None, help="Write the run report as JSON")
    runp.add_argument("--find-wait", "-t", type=float, default=None, help="Override the nominal find timeout (s)")
    runp.add_argument("--image-dir", default=None, help="Directory holding reference images")
    runp.add_argument("--no-retry", action="store_true", help="Do not retry failed steps")
    runp.add_argument("--ci", action="store_true", help="Use CI timing preset")
    runp.add_argument("--fast", action="store_true", help="Use fast timing preset")
    runp.add_argument("--slow", action="store_true", help="Use slow timing preset")
    runp.add_argument("--verbose", action="store_true", help="Show every step")

    valp = sub.add_parser("validate", help="Validate a step list (and optional settings) without running")
    valp.add_argument("--steps", "-s", required=True, help="Path to the step list YAML")
    valp.add_argument("--settings", "-c", default=None, help="Optional settings YAML")
    valp.add_argument("--schema", default=DEFAULT_SCHEMA, help="Path to step list JSON schema")
    valp.add_argument("--var", "-v", action="append", help="Variable in KEY=VALUE format (repeatable)")

    sub.add_parser("list-actions", help="List registered actions and their argument counts")

    args = p.parse_args(argv)
    if args.cmd == "run":
        return _cmd_run(args)
    if args.cmd == "validate":
        return _cmd_validate(args)
    return _cmd_list_actions(args)


if __name__ == "__main__":
    sys.exit(main())
