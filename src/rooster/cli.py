"""Rooster CLI.

Subcommands:
  open         -> list open issues created in the window
  unresponded  -> list issues nobody has answered yet (optionally with audit trail)
  doctor       -> configuration / credential diagnostics (no network)

Exit codes: 0 ok, 1 config or Pylon failure, 2 usage error,
3 unresponded issues found with ``--fail-on-found``.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import requests

from rooster.classifier import UnrespondedDiagnostics, UnrespondedIssueClassifier
from rooster.config import DEFAULT_CONFIG_FILE, ConfigError, RoosterConfig, load_config
from rooster.env_auth import create_env_auth_manager
from rooster.errors import classify_error
from rooster.logging import StructuredLogger, configure_logging
from rooster.pylon_rest import IssueSourceError, PylonRestClient
from rooster.summary import (
    format_diagnostics,
    format_open,
    format_unresponded,
    issues_to_dicts,
    report_to_dict,
    window_to_dict,
)
from rooster.window import compute_window

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_FOUND = 3

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {parsed}")
    return parsed


def _add_common(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("--config", help=f"Config file (default: {DEFAULT_CONFIG_FILE} if present)")
    sp.add_argument(
        "--days",
        type=_positive_int,
        help="Window size in days; 1 means today only (default: window.default_days)",
    )
    sp.add_argument("--json", action="store_true", help="Emit machine-readable JSON")


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="rooster", description="Find Pylon issues that nobody has answered yet"
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational logging (env: ROOSTER_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    po = sub.add_parser("open", help="List open issues in the window")
    _add_common(po)

    pu = sub.add_parser("unresponded", help="List issues with no agent reply")
    _add_common(pu)
    pu.add_argument(
        "--audit",
        action="store_true",
        help="Show why each 'new' issue was included or excluded",
    )
    pu.add_argument(
        "--fail-on-found",
        action="store_true",
        help=f"Exit {EXIT_FOUND} when any unresponded issue is found",
    )

    doc = sub.add_parser("doctor", help="Check configuration and credentials")
    doc.add_argument("--config", help=f"Config file (default: {DEFAULT_CONFIG_FILE} if present)")
    return p


def _load(args: argparse.Namespace) -> RoosterConfig:
    if args.config:
        return load_config(args.config)
    if Path(DEFAULT_CONFIG_FILE).exists():
        return load_config(DEFAULT_CONFIG_FILE)
    return RoosterConfig.defaults()


def _quiet_requested(args: argparse.Namespace) -> bool:
    return bool(args.quiet or os.environ.get("ROOSTER_QUIET") == "1")


def _setup_logging(cfg: RoosterConfig, args: argparse.Namespace) -> StructuredLogger:
    level = "WARNING" if _quiet_requested(args) else cfg.logging_level
    # stdout carries the JSON document alone
    stream = sys.stderr if getattr(args, "json", False) else None
    return configure_logging(json_logging=cfg.logging_json_enabled, level=level, stream=stream)


def build_client(
    cfg: RoosterConfig,
    *,
    session: requests.Session | None = None,
    clock: Callable[[], datetime] | None = None,
) -> PylonRestClient:
    return PylonRestClient(
        token=cfg.resolve_token(),
        base_url=cfg.api_base_url,
        timeout=cfg.timeout,
        fail_on_pagination=cfg.fail_on_pagination,
        tz=cfg.zone(),
        session=session,
        clock=clock,
    )


def _pinned_clock(cfg: RoosterConfig) -> Callable[[], datetime]:
    # one "now" per invocation so the reported window is the queried window
    tz = cfg.zone()
    now = datetime.now(tz) if tz is not None else datetime.now().astimezone()
    return lambda: now


def _print_lines(lines: Sequence[str]) -> None:
    for line in lines:
        print(line)


def _cmd_open(cfg: RoosterConfig, args: argparse.Namespace, client: PylonRestClient) -> int:
    days = args.days or cfg.default_days
    issues = UnrespondedIssueClassifier(client).get_open_issues(days)
    if args.json:
        doc = {"window": window_to_dict(client.window_for(days)), "issues": issues_to_dicts(issues)}
        print(json.dumps(doc, indent=2))
    else:
        _print_lines(format_open(issues, days))
    return EXIT_OK


def _log_audit(logger: StructuredLogger, diag: UnrespondedDiagnostics) -> None:
    for d in diag.excluded:
        logger.log_issue_decision(
            "excluded",
            d.number,
            reason=d.reason,
            title=d.title,
            first_response_time=d.first_response_time,
        )
    for d in diag.included:
        logger.log_issue_decision("included", d.number, reason=d.reason, title=d.title)


def _cmd_unresponded(
    cfg: RoosterConfig,
    args: argparse.Namespace,
    client: PylonRestClient,
    logger: StructuredLogger,
) -> int:
    days = args.days or cfg.default_days
    report = UnrespondedIssueClassifier(client).check_unresponded(days)
    diag = report.diagnostics
    logger.log_operation(
        "unresponded_check",
        days=days,
        total_fetched=diag.total_fetched,
        new_state_count=diag.new_state_count,
        included_count=diag.included_count,
        excluded_count=diag.excluded_count,
    )
    if args.json:
        print(json.dumps(report_to_dict(report, client.window_for(days)), indent=2))
    else:
        if args.audit:
            _log_audit(logger, diag)
            _print_lines(format_diagnostics(diag))
        _print_lines(format_unresponded(report, days))
    if args.fail_on_found and report.found:
        return EXIT_FOUND
    return EXIT_OK


def _cmd_doctor(cfg: RoosterConfig) -> int:
    manager = create_env_auth_manager(cfg.env_auth_config())
    token = cfg.api_token or manager.get_api_token()
    source = str(cfg.source_file) if cfg.source_file else "(defaults)"
    print(f"[doctor] config: {source}")
    print(f"[doctor] api: {cfg.api_base_url} (timeout {cfg.timeout:g}s)")
    print(f"[doctor] token: {'present' if token else 'missing'}")
    if manager.dotenv_loaded:
        print(f"[doctor] dotenv: {manager.dotenv_loaded}")
    print(f"[doctor] timezone: {cfg.timezone or 'local'}")
    window = window_to_dict(compute_window(cfg.default_days, tz=cfg.zone()))
    print(f"[doctor] default window: [{window['start']}, {window['end']}) days={window['days']}")
    print(f"[doctor] fail on pagination: {cfg.fail_on_pagination}")
    for rec in manager.get_authentication_recommendations():
        print(f"[doctor] hint: {rec}")
    return EXIT_OK if token else EXIT_FAILURE


def _report_failure(exc: Exception, secrets: Sequence[str], logger: StructuredLogger | None) -> int:
    info = classify_error(exc, secrets)
    if logger is not None:
        logger.log_error("check failed", error=info.category, transient=info.transient)
    print(f"[error] {info.category}: {info.message}")
    return EXIT_FAILURE


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logger: StructuredLogger | None = None
    secrets: list[str] = []
    try:
        cfg = _load(args)
        logger = _setup_logging(cfg, args)
        if args.cmd == "doctor":
            return _cmd_doctor(cfg)
        client = build_client(cfg, clock=_pinned_clock(cfg))
        secrets.append(client.token)
        if args.cmd == "open":
            return _cmd_open(cfg, args, client)
        return _cmd_unresponded(cfg, args, client, logger)
    except (ConfigError, IssueSourceError) as exc:
        return _report_failure(exc, secrets, logger)


__all__ = ["main", "build_client"]
