"""
Translate Evidence Receptor — Command-line host

Usage:
    python -m translate_receptor info
    python -m translate_receptor verify   --primary-user Ada [--api-key KEY]
    python -m translate_receptor discover --primary-user Ada
    python -m translate_receptor report   --primary-user Ada --format markdown
    python -m translate_receptor report   --primary-user Ada --output-dir ./out

Global options (before the command):
    --config config.json     JSON receptor configuration
    --verbose                debug logging

The API key falls back to the TRANSLATE_API_KEY environment variable.

Exit codes: 0 success, 1 invalid credentials or usage error,
2 partial result (some categories or evidence queries failed).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import httpx

from . import __version__
from .config import ReceptorConfig
from .credentials import CredentialError, TranslateCredentials
from .receptor import TranslateReceptor
from .reporting import export_json, export_markdown, render_markdown, report_to_dict

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_PARTIAL = 2

API_KEY_ENV = "TRANSLATE_API_KEY"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="translate_receptor",
        description=f"Translate evidence receptor v{__version__}",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to JSON receptor configuration",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    # Credential options shared by every service-facing command
    creds = argparse.ArgumentParser(add_help=False)
    creds.add_argument("--primary-user", required=True, help="Primary user (first name)")
    creds.add_argument(
        "--api-key",
        default=None,
        help=f"Translation API key (default: ${API_KEY_ENV})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("info", help="Show receptor identity and credential schema")
    subparsers.add_parser("verify", parents=[creds], help="Verify credentials")
    subparsers.add_parser("discover", parents=[creds], help="Discover service entities")

    report_p = subparsers.add_parser("report", parents=[creds], help="Build the evidence report")
    report_p.add_argument(
        "--format",
        choices=["json", "markdown"],
        default="json",
        help="Output format (default: json)",
    )
    report_p.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Write the report to this directory instead of stdout",
    )
    return parser


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_config(args: argparse.Namespace) -> ReceptorConfig:
    if args.config:
        config = ReceptorConfig.from_file(args.config)
    else:
        config = ReceptorConfig()
    if args.verbose:
        config.verbose = True
    return config


def build_credentials(args: argparse.Namespace) -> TranslateCredentials:
    api_key = args.api_key if args.api_key is not None else os.environ.get(API_KEY_ENV, "")
    return TranslateCredentials.from_mapping({
        "primary_user": args.primary_user,
        "api_key": api_key,
    })


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_info(receptor: TranslateReceptor) -> int:
    print(json.dumps({
        "receptor_type": receptor.get_receptor_type(),
        "known_services": receptor.get_known_services(),
        "topics": receptor.topics(),
        "credential_schema": receptor.get_credential_obj().to_dict(),
    }, indent=2))
    return EXIT_OK


async def _cmd_verify(receptor: TranslateReceptor, credentials: TranslateCredentials) -> int:
    result = await receptor.verify(credentials)
    if result.valid:
        print(f"✅ Credentials for {credentials.primary_user} are valid.")
        return EXIT_OK
    print(f"❌ Credentials rejected: {result.error}")
    return EXIT_INVALID


async def _cmd_discover(receptor: TranslateReceptor, credentials: TranslateCredentials) -> int:
    result = await receptor.discover(credentials)
    print(json.dumps({
        "entities": [e.to_dict() for e in result.entities],
        "error": str(result.error) if result.error else None,
    }, indent=2, ensure_ascii=False))
    return EXIT_PARTIAL if result.error else EXIT_OK


async def _cmd_report(
    receptor: TranslateReceptor,
    credentials: TranslateCredentials,
    args: argparse.Namespace,
) -> int:
    result = await receptor.report(credentials)
    receptor_type = receptor.get_receptor_type()

    if args.output_dir:
        run_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:8]
        if args.format == "markdown":
            path = export_markdown(result.report, receptor_type, args.output_dir, run_id, result.error)
        else:
            path = export_json(result.report, receptor_type, args.output_dir, run_id, result.error)
        print(f"📄 Report written: {path}")
    elif args.format == "markdown":
        print(render_markdown(result.report, receptor_type, result.error))
    else:
        print(json.dumps(
            report_to_dict(result.report, receptor_type, result.error),
            indent=2,
            ensure_ascii=False,
        ))

    return EXIT_PARTIAL if result.error else EXIT_OK


async def main_async(
    argv: Optional[list[str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """Async entry point. `transport` lets callers substitute the HTTP layer."""
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
    except (OSError, ValueError, KeyError) as e:
        print(f"❌ Invalid configuration: {e}", file=sys.stderr)
        return EXIT_INVALID
    configure_logging(config.verbose)

    receptor = TranslateReceptor(config, transport=transport)

    if args.command == "info":
        return _cmd_info(receptor)

    try:
        credentials = build_credentials(args)
    except CredentialError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_INVALID

    if args.command == "verify":
        return await _cmd_verify(receptor, credentials)
    if args.command == "discover":
        return await _cmd_discover(receptor, credentials)
    return await _cmd_report(receptor, credentials, args)


def main(argv: Optional[list[str]] = None) -> int:
    """Synchronous entry point for `python -m translate_receptor`."""
    return asyncio.run(main_async(argv))


if __name__ == "__main__":
    sys.exit(main())
