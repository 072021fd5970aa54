"""Launch URL parsing and token exchange."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, urlsplit

from loguru import logger

from clover.config import Settings
from clover.errors import AuthError, ExtractionError, TransportError
from clover.http import HttpClient

AUTH_FRAGMENT_PARAM = "tgWebAppData"


@dataclass(frozen=True)
class SessionToken:
    """Bearer credential shared read-only by every session of a run."""

    access: str
    scheme: str = "Bearer"

    @property
    def authorization(self) -> str:
        return f"{self.scheme} {self.access}"

    def __repr__(self) -> str:
        return f"SessionToken(scheme={self.scheme!r}, access=<{len(self.access)} chars>)"


def extract_auth_payload(url: str) -> str:
    """Return the ``tgWebAppData`` value carried in the URL fragment.

    Raises:
        ExtractionError: if the URL is malformed or the parameter is absent or empty.
    """
    try:
        parsed = urlsplit(url.strip())
    except (AttributeError, ValueError) as exc:
        raise ExtractionError(f"malformed URL: {exc}") from exc
    if not parsed.scheme or not parsed.netloc:
        raise ExtractionError("malformed URL: scheme and host are required")

    values = parse_qs(parsed.fragment, keep_blank_values=True).get(AUTH_FRAGMENT_PARAM, [])
    payload = values[0] if values else ""
    if not payload:
        raise ExtractionError(f"{AUTH_FRAGMENT_PARAM} not found in URL fragment")
    return payload


def _access_token(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    token = body.get("token")
    if not isinstance(token, dict):
        return None
    access = token.get("access")
    return access if isinstance(access, str) and access else None


async def acquire_token(http: HttpClient, payload: str, settings: Settings) -> SessionToken:
    """Exchange the auth payload for a session token in a single attempt.

    Raises:
        AuthError: if the call fails or the response has no ``token.access``.
    """
    try:
        body = await http.post(
            settings.auth_url,
            json={"query": payload, "referralToken": settings.referral_token},
        )
    except TransportError as exc:
        raise AuthError(f"token exchange failed: {exc}") from exc

    access = _access_token(body)
    if access is None:
        raise AuthError("token exchange response has no token.access field")
    logger.info("auth.token.acquired")
    return SessionToken(access=access)
