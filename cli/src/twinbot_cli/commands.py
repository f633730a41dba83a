"""CLI command handlers.

Each handler takes the client and the command's arguments, prints what the
user should see and returns the process exit code.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from twinbot_client import TwinBotClient
from twinbot_shared.models import ApiResult

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_LOGIN_REQUIRED = 2
EXIT_GOOGLE_REQUIRED = 3

DEFAULT_EVENT_DAYS = 7


def report_failure(result: ApiResult) -> int:
    """Print a failed result with the matching re-auth hint; return its exit code."""
    print(f"Error: {result.message}")
    if result.requires_login:
        print("Run `twinbot login <email> <password>` to log in again.")
        return EXIT_LOGIN_REQUIRED
    if result.requires_external_auth:
        print("Run `twinbot connect-google <token>` to reconnect Google Calendar.")
        return EXIT_GOOGLE_REQUIRED
    return EXIT_USAGE


async def login(client: TwinBotClient, args: list[str]) -> int:
    email, password = args
    result = await client.auth.login(email, password)
    if not result.success:
        return report_failure(result)
    print(f"Logged in as {result.user.email}")
    return EXIT_OK


async def logout(client: TwinBotClient, args: list[str]) -> int:
    await client.auth.logout()
    print("Logged out")
    return EXIT_OK


async def whoami(client: TwinBotClient, args: list[str]) -> int:
    user = await client.auth.current_user()
    if user is None:
        print("Not logged in")
        return EXIT_LOGIN_REQUIRED

    print(f"{user.name or user.email} <{user.email}> ({user.id})")
    claims = await client.auth.session_claims()
    if claims is not None:
        expires = datetime.fromtimestamp(claims.exp, tz=timezone.utc)
        print(f"Access token expires {expires:%Y-%m-%d %H:%M} UTC")

    token = await client.vault.get_external_token()
    if token is None:
        print("Google Calendar: not connected")
    elif token.is_expired():
        print("Google Calendar: token expired")
    else:
        print("Google Calendar: connected")
    return EXIT_OK


async def connect_google(client: TwinBotClient, args: list[str]) -> int:
    expires_in = None
    if len(args) > 1:
        try:
            expires_in = int(args[1])
        except ValueError:
            print(f"expires_in must be a whole number of seconds, got '{args[1]}'")
            return EXIT_USAGE
    try:
        await client.calendar.connect(args[0], expires_in)
    except ValueError as e:
        print(e)
        return EXIT_USAGE
    print("Google Calendar connected")
    return EXIT_OK


async def events(client: TwinBotClient, args: list[str]) -> int:
    days = DEFAULT_EVENT_DAYS
    if args:
        try:
            days = int(args[0])
        except ValueError:
            print(f"days must be a whole number, got '{args[0]}'")
            return EXIT_USAGE

    start = datetime.now(timezone.utc)
    result = await client.calendar.list_events(start, start + timedelta(days=days))
    if not result.success:
        return report_failure(result)

    if not result.events:
        print(f"No events in the next {days} days")
    for event in result.events:
        when = (event.start.date_time or event.start.date or "?") if event.start else "?"
        print(f"{when}  {event.summary or '(no title)'}")
    return EXIT_OK


async def chat(client: TwinBotClient, args: list[str]) -> int:
    result = await client.twin.chat(" ".join(args))
    if not result.success:
        return report_failure(result)
    print(result.reply)
    return EXIT_OK


async def tasks(client: TwinBotClient, args: list[str]) -> int:
    result = await client.twin.extract_tasks(" ".join(args))
    if not result.success:
        return report_failure(result)

    if not result.tasks:
        print("No tasks found")
    for task in result.tasks:
        due = f" (due {task.due_date})" if task.due_date else ""
        print(f"- {task.title}{due}")
    return EXIT_OK
