"""Storage key names for persisted credentials.

Key functions are pure. They compute key names and never touch a store. The
default profile produces the same bare names the TwinBot web app uses in
localStorage (``session``, ``user``, ``google_token``, ``google_auth_needed``),
so a store can be seeded from an exported browser session as-is. Any other
profile is prefixed, letting one Redis database hold several logins.
"""


def _scoped(profile: str, name: str) -> str:
    if not profile or profile == "default":
        return name
    return f"twinbot:{profile}:{name}"


def session_key(profile: str = "default") -> str:
    """JSON Session: ``{access_token, refresh_token}``."""
    return _scoped(profile, "session")


def user_key(profile: str = "default") -> str:
    """JSON User: ``{id, email, name}``."""
    return _scoped(profile, "user")


def external_token_key(profile: str = "default") -> str:
    """Google token: raw string (legacy) or JSON ``{token, expires_at}``."""
    return _scoped(profile, "google_token")


def external_reauth_key(profile: str = "default") -> str:
    """Flag set when the Google grant was rejected and the user must reconnect."""
    return _scoped(profile, "google_auth_needed")


def all_keys(profile: str = "default") -> list[str]:
    return [
        session_key(profile),
        user_key(profile),
        external_token_key(profile),
        external_reauth_key(profile),
    ]
