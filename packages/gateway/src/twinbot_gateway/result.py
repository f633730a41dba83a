"""GatewayResult: the envelope every gateway call returns."""

from __future__ import annotations

from typing import Any

from twinbot_shared.models import ApiResult

from twinbot_gateway.errors import ERROR_TYPES, GatewayErrorKind


class GatewayResult(ApiResult):
    """Outcome of one gateway call.

    On success ``data`` holds the parsed JSON body (or the raw text when the
    body isn't JSON). On failure ``error_kind`` says which of the five
    failure kinds occurred and ``data`` holds whatever error body came back.
    """

    error_kind: GatewayErrorKind | None = None

    @classmethod
    def ok(cls, data: Any, status_code: int) -> GatewayResult:
        return cls(success=True, message="OK", status_code=status_code, data=data)

    @classmethod
    def failure(
        cls,
        kind: GatewayErrorKind,
        message: str,
        status_code: int | None = None,
        data: Any = None,
    ) -> GatewayResult:
        return cls(
            success=False,
            message=message,
            status_code=status_code,
            data=data,
            error_kind=kind,
            requires_login=kind in (GatewayErrorKind.AUTH_REQUIRED, GatewayErrorKind.SESSION_EXPIRED),
            requires_external_auth=kind == GatewayErrorKind.EXTERNAL_AUTH_REQUIRED,
        )

    def raise_for_error(self) -> GatewayResult:
        """Return self on success, otherwise raise the GatewayError subclass for error_kind."""
        if self.success:
            return self
        kind = self.error_kind or GatewayErrorKind.SERVER_ERROR
        raise ERROR_TYPES[kind](self.message, self.status_code)
