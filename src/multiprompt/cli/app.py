# Multiprompt
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of Multiprompt.
#
# Multiprompt is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
#    You may use, modify, and distribute this file under AGPL-3.0.
#    See LICENSE for the full text.
#
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#    For proprietary use, SaaS deployment, or enterprise licensing.
#    See LICENSE-ENTERPRISE.md or contact info@phoenixlink.co.za
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""
Multiprompt CLI -- Main entry point.

Usage:
    multiprompt ask "prompt"                  # Compare all providers
    multiprompt ask "prompt" -p gemini -p openai
    multiprompt serve [--host H] [--port P]   # Web UI + API
    multiprompt --version
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from multiprompt import __version__
from multiprompt.core.config import PROVIDERS, ComparatorConfig, load_config
from multiprompt.core.dispatcher import DispatchResult, PromptDispatcher
from multiprompt.core.errors import PromptValidationError
from multiprompt.core.session import ComparisonSession

logger = logging.getLogger("multiprompt.cli")

EXIT_OK = 0
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multiprompt",
        description="Send one prompt to several AI providers and compare the answers",
    )
    parser.add_argument("--version", action="version", version=f"multiprompt {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: ~/.multiprompt/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Compare providers on one prompt")
    ask.add_argument("prompt", help="Prompt text")
    ask.add_argument(
        "-p",
        "--provider",
        action="append",
        dest="providers",
        default=None,
        help="Limit to this provider id (repeatable)",
    )

    serve = sub.add_parser("serve", help="Run the web UI and API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def format_result(result: DispatchResult, names: dict[str, str] | None = None) -> str:
    """Render a settled batch as one block per provider."""
    names = names or {}
    blocks = []
    for outcome in result.outcomes:
        title = names.get(outcome.provider, outcome.provider)
        rule = "─" * 60
        blocks.append(f"{rule}\n  {title}\n{rule}\n{outcome.display_text}")
    return "\n\n".join(blocks)


async def _ask(config: ComparatorConfig, prompt: str, providers: list[str] | None) -> DispatchResult:
    from multiprompt.core.logging import get_logger

    try:
        log = get_logger(log_dir=config.log_dir)
    except OSError:
        log = None
    dispatcher = PromptDispatcher(config, log=log)
    if providers:
        return await dispatcher.dispatch(prompt, providers)
    session = ComparisonSession(dispatcher)
    await session.submit(prompt)
    return session.last_result


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    config = load_config(args.config)

    if args.command == "serve":
        from multiprompt.api.server import run

        run(host=args.host, port=args.port, config=config)
        return EXIT_OK

    try:
        result = asyncio.run(_ask(config, args.prompt, args.providers))
    except PromptValidationError as e:
        print(f"  Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    names = {pid: meta["name"] for pid, meta in PROVIDERS.items()}
    print(format_result(result, names))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
