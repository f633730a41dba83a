"""CLI entrypoint.

Usage:
  twinbot <command> [args...]
  python -m twinbot_cli.runner <command> [args...]

Connection and credential storage come from TWINBOT_* environment variables
(see twinbot_shared.config). The default file store keeps the login in
~/.twinbot/credentials.json between runs.

Exit codes: 0 success, 1 usage or server error, 2 login required,
3 Google Calendar reconnect required.
"""

import asyncio
import logging
import sys

from twinbot_client import TwinBotClient

from twinbot_cli.commands import EXIT_USAGE
from twinbot_cli.registry import COMMANDS, accepts

logger = logging.getLogger(__name__)


def print_usage() -> None:
    print("Usage: twinbot <command> [args...]")
    print("Commands:")
    for name in sorted(COMMANDS):
        spec = COMMANDS[name]
        print(f"  {spec.usage:<45} {spec.summary}")


async def run_command(name: str, args: list[str], client: TwinBotClient | None = None) -> int:
    """Run one command and return its exit code.

    ``client`` is built from the environment when not given; a client passed
    in is left open for the caller.
    """
    spec = COMMANDS.get(name)
    if spec is None:
        print(f"Unknown command '{name}'")
        print_usage()
        return EXIT_USAGE
    if not accepts(spec, args):
        print(f"Usage: twinbot {spec.usage}")
        return EXIT_USAGE

    if client is not None:
        return await spec.handler(client, args)

    try:
        owned = TwinBotClient.from_env()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_USAGE
    async with owned:
        return await spec.handler(owned, args)


def main(argv: list[str] | None = None) -> None:
    """Parse the command line and exit with the command's exit code."""
    logging.basicConfig(level=logging.INFO)
    argv = sys.argv[1:] if argv is None else argv

    if not argv or argv[0] in ("-h", "--help", "help"):
        print_usage()
        sys.exit(EXIT_USAGE if not argv else 0)

    sys.exit(asyncio.run(run_command(argv[0], argv[1:])))


if __name__ == "__main__":
    main()
