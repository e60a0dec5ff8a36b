"""CLI entry point for lntop."""

import argparse
import logging
import sys

from lntop import __version__, config, logging_setup
from lntop.app import LntopApp
from lntop.controller import Controller
from lntop.errors import BindingSetupError, ConfigError, DataSourceError
from lntop.events import EventFeed
from lntop.models import ModelStore
from lntop.services.lnd import LndClient
from lntop.services.pubsub import PubSub

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lntop", description="Terminal dashboard for a Lightning Network node"
    )
    parser.add_argument("--version", action="version", version=f"lntop {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Path to lntop.conf (default: ~/.lntop/lntop.conf, env: LNTOP_CONF)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("wallet-balance", help="Print the total on-chain wallet balance and exit")
    subparsers.add_parser("pubsub", help="Print node events as they are observed")
    return parser


def run_dashboard(cfg: config.Config) -> int:
    client = LndClient.from_config(cfg)
    models = ModelStore(client)
    feed = EventFeed()
    # Start watching before bootstrap; events queue in the feed until the app listens.
    pubsub = PubSub(
        LndClient.from_config(cfg), feed, interval=cfg.poll_interval, call_timeout=cfg.timeout
    )
    pubsub.start()
    try:
        models.bootstrap()
        app = LntopApp(Controller(models), feed)
        app.run()
    finally:
        pubsub.stop()
    return 0


def wallet_balance(cfg: config.Config) -> int:
    client = LndClient.from_config(cfg)
    print(client.get_wallet_balance().total)
    return 0


def pubsub_run(cfg: config.Config) -> int:
    client = LndClient.from_config(cfg)
    feed = EventFeed()
    pubsub = PubSub(client, feed, interval=cfg.poll_interval, call_timeout=cfg.timeout)
    pubsub.start()
    try:
        for event in feed:
            print(f"{event.kind.value} {event.payload if event.payload is not None else ''}".rstrip())
    except KeyboardInterrupt:
        pass
    finally:
        pubsub.stop()
    return 0


COMMANDS = {
    None: run_dashboard,
    "wallet-balance": wallet_balance,
    "pubsub": pubsub_run,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = config.load(args.config)
    except ConfigError as e:
        print(f"lntop: config: {e}", file=sys.stderr)
        return 1

    # The dashboard draws on the terminal, so only other commands log to stderr.
    try:
        logging_setup.configure(
            logging_setup.parse_level(cfg.log_level, verbose=args.verbose),
            file_path=cfg.log_file,
            stream=args.command is not None,
        )
    except OSError as e:
        print(f"lntop: log file: {e}", file=sys.stderr)
        return 1

    try:
        return COMMANDS[args.command](cfg)
    except (ConfigError, DataSourceError, BindingSetupError) as e:
        logger.error("startup failed: %s", e)
        print(f"lntop: {e}", file=sys.stderr)
        return 1
