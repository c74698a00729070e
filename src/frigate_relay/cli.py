"""
Frigate Relay CLI
Main entry point for running the relay service.

  --validate  Check configuration validity
  --summary   Show groups, cameras and effective schedules
"""

import argparse
import logging
import signal
import sys
from dataclasses import dataclass
from threading import Event as ThreadEvent

from .config import (
    Config,
    ConfigError,
    ScheduleResolver,
    load_config,
    print_config_summary,
    print_validation_result,
)
from .processor import (
    AlertDispatcher,
    DispatchPool,
    EventIntake,
    FrigateClient,
    MediaFetcher,
    TelegramNotifier,
    WebhookNotifier,
)

logger = logging.getLogger(__name__)

# Module-level shutdown signal for SIGTERM/SIGINT handling
_shutdown_signal = ThreadEvent()


def _handle_shutdown_signal(signum, _frame):
    """
    Handle SIGTERM/SIGINT for graceful shutdown.

    This allows the relay to shutdown cleanly when running under
    systemd, Docker, or other process managers that send SIGTERM.
    """
    signal_name = "SIGTERM" if signum == signal.SIGTERM else "SIGINT"
    # Note: print is safer than logger in signal handlers
    print(f"\nReceived {signal_name}, initiating graceful shutdown...")
    _shutdown_signal.set()


def _setup_signal_handlers():
    """Register signal handlers for graceful shutdown."""
    signal.signal(signal.SIGTERM, _handle_shutdown_signal)
    signal.signal(signal.SIGINT, _handle_shutdown_signal)


def setup_logging(quiet: bool = False, verbose: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        quiet: If True, only show warnings and errors
        verbose: If True, include debug messages
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    # Custom formatter with shorter module names
    class ShortNameFormatter(logging.Formatter):
        def format(self, record):
            record.name = record.name.replace("frigate_relay.", "relay.")
            return super().format(record)

    handler = logging.StreamHandler()
    handler.setFormatter(
        ShortNameFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(level)

    # Per-request connection chatter is noise at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Frigate Relay - Forward Frigate detections to Telegram groups",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m frigate_relay                      # Run with ./config.yaml
  python -m frigate_relay -c /etc/relay.yaml   # Run with a specific config
  python -m frigate_relay --validate           # Check config validity
  python -m frigate_relay --summary            # Show routing and schedules

Environment Variables:
  CONFIG_PATH        - Config file location
  TELEGRAM_BOT_TOKEN - Fallback for telegram_bot_token
  API_URL            - Fallback for frigate_api_url
  WEBHOOK_TRIGGER    - Fallback for webhook_url
        """,
    )

    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to config file (default: search ./config.yaml and ~/.config)",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Quiet mode - only show warnings and errors",
    )
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose mode - include debug messages",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and exit",
    )

    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print configuration summary and exit",
    )

    return parser.parse_args(argv)


@dataclass
class Relay:
    """Wired-up service components."""

    resolver: ScheduleResolver
    dispatcher: AlertDispatcher
    pool: DispatchPool
    intake: EventIntake


def build_relay(config: Config) -> Relay:
    """Create and connect all service components from config."""
    resolver = ScheduleResolver(config)
    client = FrigateClient(config.frigate_api_url, timeout=config.request_timeout_seconds)
    fetcher = MediaFetcher.from_config(config, client)
    notifier = TelegramNotifier.from_config(config)
    webhook = WebhookNotifier(config.webhook_url) if config.webhook_url else None

    dispatcher = AlertDispatcher(resolver, notifier, fetcher, webhook)
    pool = DispatchPool(
        dispatcher.process_event,
        max_workers=config.max_concurrent_dispatches,
        max_pending=config.dispatch_queue_size,
    )
    intake = EventIntake.from_config(config, client, resolver, pool.submit)
    return Relay(resolver=resolver, dispatcher=dispatcher, pool=pool, intake=intake)


def run_validate(config_path: str | None) -> int:
    """Run validation mode."""
    try:
        load_config(config_path)
    except ConfigError as e:
        print_validation_result(False, str(e))
        return 1

    print_validation_result(True)
    return 0


def run_summary(config_path: str | None) -> int:
    """Run summary mode."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    print_config_summary(config)
    return 0


def run_service(config: Config) -> None:
    """Run the relay until SIGTERM/SIGINT."""
    relay = build_relay(config)
    print_config_summary(config, relay.resolver)

    _setup_signal_handlers()
    relay.intake.start()
    logger.info("Frigate event listener started")

    try:
        # Short waits keep the main thread responsive to signals
        while not _shutdown_signal.wait(timeout=1.0):
            pass
    except KeyboardInterrupt:
        pass

    logger.info("Shutting down...")
    relay.intake.stop()

    if relay.pool.pending:
        logger.info(f"Waiting for {relay.pool.pending} in-flight dispatch(es)...")
    relay.pool.shutdown(wait=True)
    relay.dispatcher.close(wait=True)
    logger.info("Shutdown complete")


def main(argv: list[str] | None = None) -> None:
    """Main orchestrator function."""
    args = parse_args(argv)
    setup_logging(quiet=args.quiet or args.validate, verbose=args.verbose)

    if args.validate:
        sys.exit(run_validate(args.config))

    if args.summary:
        sys.exit(run_summary(args.config))

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    run_service(config)


if __name__ == "__main__":
    main()
