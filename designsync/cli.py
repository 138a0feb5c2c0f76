"""CLI entrypoints for designsync commands."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, Mapping

from .collaborators import (
    EnvironmentSecretResolver,
    GitVersionControl,
    HttpLicenseClient,
    JsonExportConnector,
)
from .config import DESIGN_PLATFORMS, TARGET_PLATFORMS, load_config, validate_config
from .custom_sections import MERGE_STRATEGIES
from .errors import ConfigError, ExitCode
from .logging import configure_logging
from .orchestrator import SyncOrchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the target repository root (defaults to current directory).",
    )
    parser.add_argument("--design-platform", choices=DESIGN_PLATFORMS, help="Design platform to extract from.")
    parser.add_argument("--target-platform", choices=TARGET_PLATFORMS, help="Platform to generate for.")
    parser.add_argument("--tokens-file", help="Exported token JSON file to read.")
    parser.add_argument("--tag-template", help="Template used to build the version-control tag.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="designsync",
        description="Sync design tokens into platform code with preserved custom sections.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, help="Also write detailed logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser(
        "sync",
        help="Extract, normalize and regenerate platform token files.",
    )
    _add_verbose_option(sync_parser, suppress_default=True)
    _add_run_options(sync_parser)
    sync_parser.add_argument("--mode", choices=("sync", "analyze"), help="Operation mode.")
    sync_parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Run every check and report without writing artifacts or touching git.",
    )
    sync_parser.add_argument(
        "--no-op",
        action="store_true",
        help="Analyze and report only, as when no license is available.",
    )
    sync_parser.add_argument("--merge-strategy", choices=MERGE_STRATEGIES, help="Custom section merge strategy.")

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate configuration and the tag template without running the pipeline.",
    )
    _add_verbose_option(validate_parser, suppress_default=True)
    _add_run_options(validate_parser)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _environment(args: argparse.Namespace, base: Mapping[str, str]) -> Dict[str, str]:
    """Overlay command-line options onto the environment-driven settings."""
    env = dict(base)
    design = getattr(args, "design_platform", None)
    if design:
        for name in DESIGN_PLATFORMS:
            env[_flag("DESIGN_PLATFORM_", name)] = "true" if name == design else "false"
    target = getattr(args, "target_platform", None)
    if target:
        for name in TARGET_PLATFORMS:
            env[_flag("TARGET_PLATFORM_", name)] = "true" if name == target else "false"
    overrides = {
        "DESIGN_TOKENS_FILE": getattr(args, "tokens_file", None),
        "TAG_TEMPLATE": getattr(args, "tag_template", None),
        "MODE": getattr(args, "mode", None),
        "MERGE_STRATEGY": getattr(args, "merge_strategy", None),
    }
    for key, value in overrides.items():
        if value:
            env[key] = value
    if getattr(args, "validate_only", False):
        env["VALIDATE_ONLY"] = "true"
    if getattr(args, "no_op", False):
        env["NO_OP"] = "true"
    return env


def _flag(prefix: str, name: str) -> str:
    return prefix + name.upper().replace("-", "_")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for designsync commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    env = _environment(args, os.environ)
    try:
        config = load_config(args.path, environ=env)
    except ConfigError as exc:
        parser.exit(int(exc.exit_code), f"{exc}\n")
    configure_logging(verbose=bool(args.verbose), level=config.log_level, log_file=args.log_file)

    if args.command == "validate":
        try:
            validate_config(config)
        except ConfigError as exc:
            parser.exit(int(exc.exit_code), f"{exc}\n")
        print(f"Configuration valid: {config.design_platform} -> {config.target_platform}")
        return

    if args.command == "sync":
        license_client = (
            HttpLicenseClient(config.license.server_url, timeout=config.license.timeout_seconds)
            if config.license.server_url
            else None
        )
        orchestrator = SyncOrchestrator(
            JsonExportConnector(),
            license_client=license_client,
            secret_resolver=EnvironmentSecretResolver(env),
            version_control=GitVersionControl(),
        )
        outcome = orchestrator.run(config)
        for line in outcome.summary_lines():
            print(line)
        if outcome.exit_code != ExitCode.SUCCESS:
            parser.exit(int(outcome.exit_code))
        return

    parser.exit(1, "Unknown command\n")  # pragma: no cover - argparse enforces choices


if __name__ == "__main__":
    main(sys.argv[1:])
