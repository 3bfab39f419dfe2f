from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import load_settings
from .di import create_client
from .logging import configure_logging
from .runtime import run

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main entry point supporting both CLI commands and listener mode.

    - `voltnet` or `voltnet listen`: log realtime notifications until interrupted
    - `voltnet <typer-subcommand>`: run CLI mode (e.g. `voltnet balance`)
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        return _run_listen_mode([])

    if argv[0] == "listen":
        return _run_listen_mode(argv[1:])

    return _run_cli_mode(argv)


def _run_listen_mode(argv: list[str]) -> int:
    """Run in realtime listener mode."""
    parser = argparse.ArgumentParser(
        prog="voltnet listen", description="Log VOLTNET realtime notifications"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file (default: VOLTNET_CONFIG or ./voltnet.yml)",
    )

    args = parser.parse_args(argv)
    configure_logging(Path("logs"))

    settings = load_settings(args.config)
    if not settings.enable_realtime:
        settings = settings.model_copy(update={"enable_realtime": True})

    logger.info("voltnet listener booting")
    try:
        asyncio.run(_listen(settings))
    except KeyboardInterrupt:
        logger.info("interrupted")
    logger.info("voltnet listener exit")

    return 0


async def _listen(settings) -> None:
    # built inside the loop so the channel starts right away
    sdk = create_client(settings)
    await run(sdk)


def _run_cli_mode(argv: list[str]) -> int:
    """Run in CLI mode using Typer."""
    try:
        configure_logging(Path("logs"))

        from .cli import run_cli
        run_cli(argv)
        return 0
    except SystemExit as e:
        return e.code if e.code else 0
    except Exception as e:
        logger.error("CLI error: %s", e, exc_info=True)
        return 1
