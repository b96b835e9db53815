"""REST client for the forge's identity and repository endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from . import __version__
from .config import DEFAULT_API_URL
from .errors import RemoteError

logger = logging.getLogger(__name__)


class ForgeClient:
    """Minimal forge API client authenticated with a bearer token.

    Only three endpoints are used: the authenticated identity, a repository
    lookup by owner and name, and repository creation for the authenticated
    user. Status codes are returned to the caller rather than raised, since
    404 and 422 are meaningful outcomes for the reconciler.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.api_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "User-Agent": f"gitx/{__version__}",
            },
            transport=transport,
        )

    def __enter__(self) -> ForgeClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_authenticated_login(self) -> str:
        """Return the account name the token belongs to."""

        response = self._request("GET", "/user")
        if response.status_code != 200:
            raise RemoteError(
                "Unable to determine forge account from token", response.status_code
            )
        login = json_body(response).get("login")
        if not isinstance(login, str) or not login.strip():
            raise RemoteError("Forge identity response has no 'login' field")
        return login.strip()

    def get_repository(self, account: str, name: str) -> httpx.Response:
        return self._request("GET", f"/repos/{account}/{name}")

    def create_repository(self, name: str, *, private: bool) -> httpx.Response:
        return self._request(
            "POST", "/user/repos", json={"name": name, "private": private}
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteError(f"{method} {self.api_url}{path} failed: {exc}") from exc
        logger.debug("%s %s -> %s", method, response.url, response.status_code)
        return response


def json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}
