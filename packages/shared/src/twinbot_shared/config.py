"""Client configuration factory.

Everything comes from environment variables so the same code runs against a
local backend (``npm run dev`` on port 5002) and a deployed one:

  - TWINBOT_API_URL     backend base URL (default http://localhost:5002)
  - TWINBOT_TIMEOUT     per-request timeout in seconds (default 30)
  - TWINBOT_STORE       credential store backend: memory, file or redis (default file)
  - TWINBOT_STORE_PATH  JSON file used by the file store (default ~/.twinbot/credentials.json)
  - TWINBOT_PROFILE     key namespace, so one store can hold several logins

The redis backend talks to Upstash when UPSTASH_REDIS_REST_URL is set and to
an in-process fakeredis otherwise.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel

DEFAULT_API_URL = "http://localhost:5002"
DEFAULT_STORE_PATH = Path.home() / ".twinbot" / "credentials.json"

StoreBackend = Literal["memory", "file", "redis"]


class ClientConfig(BaseModel):
    """Connection and storage settings for a TwinBotClient."""

    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    store_backend: StoreBackend = "memory"
    store_path: Path = DEFAULT_STORE_PATH
    profile: str = "default"

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build a config from TWINBOT_* environment variables.

        Raises ValueError for an unknown store backend or a non-numeric timeout,
        so a typo fails at startup instead of on the first request.
        """
        backend = os.environ.get("TWINBOT_STORE", "file").strip().lower()
        if backend not in ("memory", "file", "redis"):
            raise ValueError(
                f"Unknown TWINBOT_STORE '{backend}'. Supported: file, memory, redis"
            )

        raw_timeout = os.environ.get("TWINBOT_TIMEOUT", "30")
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"TWINBOT_TIMEOUT must be a number, got '{raw_timeout}'") from None

        store_path = os.environ.get("TWINBOT_STORE_PATH")
        return cls(
            api_url=os.environ.get("TWINBOT_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout=timeout,
            store_backend=backend,  # type: ignore[arg-type]
            store_path=Path(store_path).expanduser() if store_path else DEFAULT_STORE_PATH,
            profile=os.environ.get("TWINBOT_PROFILE", "default"),
        )
