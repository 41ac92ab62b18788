from __future__ import annotations

from typing import Optional

from ...core.exceptions import TransportError


class SlackAPIError(TransportError):
    """Slack Web API call failed (HTTP error or ``"ok": false`` response)."""

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, method=method)
        self.error_code = error_code
        self.status_code = status_code
