"""Command line interface for the listing walker."""

from __future__ import annotations

import argparse
import logging
import signal
from typing import Optional, Sequence

from .browser.profile import LaunchProfile
from .browser.session import BrowserSession
from .core.config import (
    DEFAULT_ENTRY_FILE,
    DEFAULT_QUERY_FILE,
    ConfigurationError,
    load_configuration,
)
from .core.pacing import Pacer
from .traversal.machine import TraversalStateMachine

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Walks a paginated listing and activates items until stopped")
    parser.add_argument("--entry-file", default=DEFAULT_ENTRY_FILE, help="File holding the entry URL (re-read on every reset)")
    parser.add_argument("--query-file", default=DEFAULT_QUERY_FILE, help="File holding the listing query token")
    parser.add_argument("--site-url", default=None, help="Site root; derived from the entry URL when omitted")
    parser.add_argument("--headed", action="store_true", help="Shows the browser window")
    parser.add_argument("--screens-dir", default=None, help="Directory for diagnostic snapshots")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enables debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def install_signal_handlers(pacer: Pacer) -> None:
    def _handle(_signum, _frame) -> None:
        pacer.interrupt()

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, _handle)


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    configure_logging(args.verbose)
    config = load_configuration(
        args.entry_file,
        args.query_file,
        site_url=args.site_url,
        headless=False if args.headed else None,
        screens_dir=args.screens_dir,
    )

    print("[*] Checking configuration...")
    try:
        config.validate()
    except ConfigurationError as exc:
        print(f"[!] {exc}")
        return 2
    print(f"[+] Site: {config.site_url}")

    pacer = Pacer()
    install_signal_handlers(pacer)

    print("\n=== [1/2] Browser ===")
    session = BrowserSession.launch(LaunchProfile(headless=config.headless))
    try:
        machine = TraversalStateMachine.from_config(session, config, pacer)
        print("\n=== [2/2] Traversal (Ctrl+C to stop) ===")
        state = machine.run()
    finally:
        pacer.cancel()
        session.close()

    print(
        f"[+] Activated {state.total_activation_count} item(s) over "
        f"{state.pages_processed} page(s) with {state.reset_count} reset(s)"
    )
    return 0


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
