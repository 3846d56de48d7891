"""Async client for the life grid REST API (profile load and cell data save)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any
from urllib.parse import quote

import httpx

from lifegrid.datetime_utils import parse_birth_date

from .annotations import AnnotationMap, parse_cell_data
from .config import ApiConfig

LOGGER = logging.getLogger(__name__)

SESSION_COOKIE = "session"


class LifeDataError(RuntimeError):
    """Generic life data API failure."""


class LifeDataAuthError(LifeDataError):
    """Raised when the API returns 401/403."""


class LifeDataNotFoundError(LifeDataError):
    """Raised when the requested profile does not exist."""


@dataclass(frozen=True, slots=True)
class ProfileData:
    username: str
    date_of_birth: date | None
    cell_data: AnnotationMap


def normalize_username(username: str) -> str:
    return username.strip().lower()


@dataclass(slots=True)
class LifeDataClient:
    config: ApiConfig
    transport: httpx.AsyncBaseTransport | None = None
    logger: logging.Logger = field(default=LOGGER, repr=False)
    _client: httpx.AsyncClient = field(init=False, repr=False)
    _closed: bool = field(init=False, default=True, repr=False)

    def __post_init__(self) -> None:
        if not self.config.base_url:
            raise ValueError("Life data API base URL is not configured")
        cookies = {SESSION_COOKIE: self.config.session_id} if self.config.session_id else None
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url.rstrip("/"),
            headers={"Content-Type": "application/json"},
            cookies=cookies,
            timeout=self.config.timeout,
            verify=self.config.verify_ssl,
            transport=self.transport,
            trust_env=False,
        )
        self._closed = False

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()

    async def get_profile(self, username: str) -> ProfileData | None:
        """Load a public profile. Returns None when the user does not exist."""
        normalized = normalize_username(username)
        if not normalized:
            return None
        try:
            payload = await self._request("GET", f"/api/profile/{quote(normalized, safe='')}")
        except LifeDataNotFoundError:
            return None
        if not isinstance(payload, dict):
            raise LifeDataError("Unexpected profile payload")
        return ProfileData(
            username=str(payload.get("username") or normalized),
            date_of_birth=parse_birth_date(payload.get("dateOfBirth")),
            cell_data=parse_cell_data(payload.get("cellData"), logger=self.logger),
        )

    async def save_cell_data(self, cell_data: dict[str, dict[str, str]]) -> bool:
        """Persist the full cell map for the signed-in user.

        Returns False instead of raising so the save scheduler can keep the
        map marked dirty and try again later.
        """
        try:
            await self._request("PUT", "/api/life-data", json={"cellData": cell_data})
        except LifeDataError as exc:
            self.logger.warning("Failed to save life data: %s", exc)
            return False
        return True

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise LifeDataError(f"Failed to contact life data API: {exc}") from exc
        if response.status_code in (401, 403):
            raise LifeDataAuthError("Life data API rejected the session")
        if response.status_code == 404:
            raise LifeDataNotFoundError(f"Not found: {path}")
        if response.status_code >= 400:
            raise LifeDataError(f"Life data API error {response.status_code}: {response.text}")
        if response.headers.get("content-type", "").startswith("application/json"):
            return response.json()
        return response.text
