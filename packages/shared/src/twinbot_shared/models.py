"""Pydantic base models shared across the client packages.

Every service call returns an ApiResult (or a subclass) so callers branch on
``success`` and the two re-auth flags instead of catching exceptions for
expected failures like an expired session or a revoked Google grant.
"""

from typing import Any

from pydantic import BaseModel


class ApiResult(BaseModel):
    """Standard result envelope returned by gateway and service calls.

    ``requires_login`` means the Session is gone and the user has to log in
    again. ``requires_external_auth`` means only the Google grant is gone and
    the user has to reconnect their calendar; the Session is still valid.
    """

    success: bool
    message: str = ""
    status_code: int | None = None
    data: Any = None
    requires_login: bool = False
    requires_external_auth: bool = False
