"""
Main CLI entry point for logship.

Ships one message to the ingest endpoint, then either exits (``--once``) or
keeps the client running until SIGINT/SIGTERM, stopping the timer and
flushing before exit. Identity comes from ``LOGSHIP_IDENTITY__*`` variables;
``LOGDNA_API_KEY`` is honored when no prefixed key is set.
"""

from __future__ import annotations

import argparse
import os
import signal
import sys
import threading
from typing import Sequence

from pydantic import ValidationError

from ..client import Client
from ..core import diagnostics, shutdown
from ..core.errors import ConfigurationError
from ..core.levels import LogLevel, get_all_levels
from ..core.settings import CoreSettings, IdentitySettings, Settings

EXIT_OK = 0
EXIT_FLUSH_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logship",
        description="Ship a log line to the ingest API using a buffered client.",
    )
    parser.add_argument("--message", "-m", default="Hi", help="Line to ship")
    parser.add_argument(
        "--level",
        "-l",
        default=LogLevel.ERROR.value,
        choices=get_all_levels(),
        help="Level label for the line",
    )
    parser.add_argument("--app", help="Override the app tag")
    parser.add_argument("--env", help="Override the env tag")
    parser.add_argument("--hostname", help="Override the source hostname")
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between background flushes",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Flush immediately and exit instead of waiting for a signal",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Environment settings with command-line overrides applied.

    Raises:
        ConfigurationError: If an override fails validation.
    """
    settings = Settings()
    overrides = {
        key: value
        for key, value in (
            ("app", args.app),
            ("env", args.env),
            ("hostname", args.hostname),
        )
        if value
    }
    if not settings.identity.api_key and os.getenv("LOGDNA_API_KEY"):
        overrides["api_key"] = os.environ["LOGDNA_API_KEY"]
    try:
        if overrides:
            identity = IdentitySettings.model_validate(
                {**settings.identity.model_dump(), **overrides}
            )
            settings = settings.model_copy(update={"identity": identity})
        if args.interval is not None:
            core = CoreSettings.model_validate(
                {
                    **settings.core.model_dump(),
                    "flush_interval_seconds": args.interval,
                }
            )
            settings = settings.model_copy(update={"core": core})
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise ConfigurationError(
            f"Invalid command-line override: {', '.join(fields)}",
            fields=fields,
            cause=e,
        ) from e
    return settings


def _wait_for_signal() -> int:
    received = threading.Event()
    caught: list[int] = []

    def _handler(signum: int, _frame: object) -> None:
        caught.append(signum)
        received.set()

    signal.signal(signal.SIGINT, _handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handler)
    while not received.wait(0.5):
        pass
    return caught[0]


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args)
        client = Client.from_settings(settings)
    except ConfigurationError as e:
        sys.stderr.write(f"Error: {e.message}\n")
        return EXIT_CONFIG_ERROR

    shutdown.register_client(client)
    shutdown.install_handlers(signals=False)

    client.log(None, args.level, args.message)
    if not args.once:
        client.start()
        signum = _wait_for_signal()
        sys.stderr.write(f"received signal {signal.Signals(signum).name}, quitting\n")

    result = client.shutdown()
    shutdown.unregister_client(client)
    if not result.ok:
        diagnostics.warn(
            "cli",
            "final flush failed",
            force=True,
            error=str(result.error),
            dropped=result.dropped,
        )
        return EXIT_FLUSH_FAILED
    return EXIT_OK


def cli_main() -> int:
    """Console-script entry point."""
    return main()


if __name__ == "__main__":
    sys.exit(cli_main())
