"""CLI entry point for the desktop companion."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from notifier.utils.logging import setup_logging

from .alerts import DesktopAlertRenderer
from .config import CompanionSettings, get_companion_settings
from .forwarder import CompanionForwarder

logger = logging.getLogger(__name__)


async def _run(forwarder: CompanionForwarder) -> None:
    loop = asyncio.get_running_loop()

    def request_shutdown(sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down gracefully", sig.name)
        loop.create_task(forwarder.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown, sig)
        except NotImplementedError:
            # Windows event loops have no signal handler support.
            pass

    await forwarder.run()


def build_forwarder(settings: CompanionSettings, *, dry_run: bool = False) -> CompanionForwarder:
    renderer = DesktopAlertRenderer(
        sound=settings.notification_sound,
        timeout=settings.notification_timeout,
        enabled=not dry_run,
    )
    return CompanionForwarder(
        settings.websocket_url,
        renderer,
        initial_delay=settings.reconnect_initial_delay,
        max_delay=settings.reconnect_max_delay,
        multiplier=settings.reconnect_multiplier,
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="notifier-companion",
        description="Show desktop alerts for live bet notifications",
    )
    parser.add_argument("--url", help="Notification service URL (overrides NOTIFIER_URL)")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Log alerts instead of displaying them"
    )
    args = parser.parse_args()

    settings = CompanionSettings(notifier_url=args.url) if args.url else get_companion_settings()

    setup_logging(logging.DEBUG if args.verbose or settings.debug else logging.INFO)
    logger.info("Starting desktop companion for %s", settings.websocket_url)

    forwarder = build_forwarder(settings, dry_run=args.dry_run)
    try:
        asyncio.run(_run(forwarder))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
