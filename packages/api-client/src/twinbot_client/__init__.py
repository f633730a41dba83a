"""Python client for the TwinBot backend.

    async with TwinBotClient.from_env() as client:
        await client.auth.login(email, password)
        result = await client.calendar.list_events(start, end)
        if result.requires_external_auth:
            ...  # send the user through client.calendar.get_auth_url()
"""

from twinbot_client.client import TwinBotClient

__all__ = ["TwinBotClient"]
