"""Command registry: maps command names to their handlers and usage strings.

The runner looks the first CLI argument up here, checks the argument count
against ``min_args``/``max_args`` and hands the rest to the handler. A new
command is one handler in commands.py plus one entry below.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from twinbot_client import TwinBotClient

from twinbot_cli import commands

Handler = Callable[[TwinBotClient, list[str]], Awaitable[int]]


@dataclass
class CommandSpec:
    """One CLI command. ``max_args`` of None means the rest of the line is free text."""

    handler: Handler
    usage: str
    summary: str
    min_args: int = 0
    max_args: int | None = 0


COMMANDS: dict[str, CommandSpec] = {
    "login": CommandSpec(
        handler=commands.login,
        usage="login <email> <password>",
        summary="Log in and store the session",
        min_args=2,
        max_args=2,
    ),
    "logout": CommandSpec(
        handler=commands.logout,
        usage="logout",
        summary="Forget the stored session",
    ),
    "whoami": CommandSpec(
        handler=commands.whoami,
        usage="whoami",
        summary="Show the logged-in user and when the access token expires",
    ),
    "connect-google": CommandSpec(
        handler=commands.connect_google,
        usage="connect-google <token> [expires_in_seconds]",
        summary="Store a Google Calendar access token",
        min_args=1,
        max_args=2,
    ),
    "events": CommandSpec(
        handler=commands.events,
        usage="events [days]",
        summary="List calendar events for the next N days (default 7)",
        max_args=1,
    ),
    "chat": CommandSpec(
        handler=commands.chat,
        usage="chat <message>",
        summary="Send a message to the assistant",
        min_args=1,
        max_args=None,
    ),
    "tasks": CommandSpec(
        handler=commands.tasks,
        usage="tasks <text>",
        summary="Extract tasks from free text",
        min_args=1,
        max_args=None,
    ),
}


def accepts(spec: CommandSpec, args: list[str]) -> bool:
    if len(args) < spec.min_args:
        return False
    return spec.max_args is None or len(args) <= spec.max_args
