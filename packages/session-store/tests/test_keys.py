"""Key naming: default profile matches the browser's localStorage names."""

from twinbot_session_store.keys import (
    all_keys,
    external_reauth_key,
    external_token_key,
    session_key,
    user_key,
)


def test_default_profile_uses_bare_names():
    assert session_key() == "session"
    assert user_key() == "user"
    assert external_token_key() == "google_token"
    assert external_reauth_key() == "google_auth_needed"


def test_named_profile_is_prefixed():
    assert session_key("work") == "twinbot:work:session"
    assert external_token_key("work") == "twinbot:work:google_token"


def test_profiles_do_not_collide():
    assert set(all_keys("a")).isdisjoint(all_keys("b"))
    assert len(set(all_keys())) == 4
