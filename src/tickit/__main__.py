"""Entry point for tickit."""

import asyncio
import sys
from pathlib import Path


def run_tui(config_path: str | None = None) -> int:
    """Validate config and connection, then hand the terminal to the TUI."""
    from tickit.api.client import JiraClient
    from tickit.api.connection import ConnectionStatus, check_connection, validate_config
    from tickit.config import load_config
    from tickit.errors import TrackerError
    from tickit.logs import setup_logging
    from tickit.ui import TickitApp

    try:
        config = load_config(Path(config_path) if config_path else None)
        setup_logging(config.settings["log_level"], config.settings["log_file"] or None)
        validate_config(config)
    except TrackerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    async def probe():
        client = JiraClient.from_config(config)
        try:
            return await check_connection(client, config.settings["jql"])
        finally:
            await client.aclose()

    try:
        status, detail = asyncio.run(probe())
        tracker = JiraClient.from_config(config)
    except TrackerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    if status is not ConnectionStatus.CONNECTED:
        print(f"error: {status.message(detail)}", file=sys.stderr)
        return 1

    app = TickitApp(
        tracker,
        jql=config.settings["jql"],
        page_size=config.settings["page_size"],
        instance=config.instance,
    )
    app.run()
    return 0


def main():
    # No arguments = TUI mode
    if len(sys.argv) < 2:
        sys.exit(run_tui())

    from tickit.cli import build_parser

    parser = build_parser()
    args = parser.parse_args()

    if not hasattr(args, "func"):
        if args.noun is None and args.config:
            sys.exit(run_tui(args.config))
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
