"""
Quran Foundation content API client.

- UpstreamTokenCache holds one OAuth2 client-credentials token with an
  absolute expiry (epoch millis). Concurrent misses are collapsed into a
  single token request.
- QuranFoundationClient calls the content API with that token and drops the
  cached token when the API answers 401.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from utils.exceptions import (
    OAuthTokenError,
    UpstreamConfigurationError,
    UpstreamError,
    UpstreamUnauthorized,
)

logger = logging.getLogger(__name__)

OAUTH_TOKEN_ENDPOINT = "/oauth2/token"
CHAPTERS_ENDPOINT = "/content/api/v4/chapters"
VERSES_BY_CHAPTER_ENDPOINT = "/content/api/v4/verses/by_chapter"

DEFAULT_SAFETY_MARGIN_SECONDS = 60
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class CachedToken:
    access_token: str
    expires_at: int  # epoch millis


def _now_millis() -> int:
    return int(time.time() * 1000)


class UpstreamTokenCache:
    def __init__(
        self,
        *,
        oauth_base_url: str,
        client_id: str | None,
        client_secret: str | None,
        scope: str = "content",
        safety_margin_seconds: int = DEFAULT_SAFETY_MARGIN_SECONDS,
        http: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], int] = _now_millis,
    ):
        self._token_url = oauth_base_url.rstrip("/") + OAUTH_TOKEN_ENDPOINT
        self._client_id = client_id
        self._client_secret = client_secret
        self._scope = scope
        self._margin_ms = safety_margin_seconds * 1000
        self._http = http
        self._timeout = timeout
        self._clock = clock
        self._cached: Optional[CachedToken] = None
        self._lock = threading.Lock()

    @property
    def cached(self) -> Optional[CachedToken]:
        return self._cached

    def _fresh(self) -> Optional[str]:
        cached = self._cached
        if cached is not None and self._clock() < cached.expires_at:
            return cached.access_token
        return None

    def get_token(self) -> str:
        token = self._fresh()
        if token is not None:
            return token
        with self._lock:
            # another thread may have refreshed while we waited
            token = self._fresh()
            if token is not None:
                return token
            return self._refresh()

    def clear(self) -> None:
        self._cached = None

    def _post(self, **kwargs) -> httpx.Response:
        if self._http is not None:
            return self._http.post(self._token_url, **kwargs)
        return httpx.post(self._token_url, timeout=self._timeout, **kwargs)

    def _refresh(self) -> str:
        if not self._client_id or not self._client_secret:
            logger.error("QF_CLIENT_ID and QF_CLIENT_SECRET environment variables are required")
            raise UpstreamConfigurationError()

        try:
            response = self._post(
                data={"grant_type": "client_credentials", "scope": self._scope},
                auth=(self._client_id, self._client_secret),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as exc:
            logger.error("Failed to get access token: %s", exc)
            raise UpstreamError() from exc

        if not response.is_success:
            logger.error("OAuth2 error %s: %s", response.status_code, response.text)
            raise OAuthTokenError(response.status_code, response.text)

        try:
            payload = response.json()
            access_token = payload["access_token"]
            expires_in = int(payload["expires_in"])
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Invalid OAuth2 token response: %s", exc)
            raise UpstreamError() from exc

        self._cached = CachedToken(
            access_token=access_token,
            expires_at=self._clock() + expires_in * 1000 - self._margin_ms,
        )
        logger.info("Fetched upstream access token, expires in %ss", expires_in)
        return access_token


class QuranFoundationClient:
    def __init__(
        self,
        token_cache: UpstreamTokenCache,
        *,
        api_base_url: str,
        client_id: str | None,
        http: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.token_cache = token_cache
        self._base_url = api_base_url.rstrip("/")
        self._client_id = client_id
        self._http = http
        self._timeout = timeout

    @classmethod
    def from_config(cls, config, http: Optional[httpx.Client] = None) -> "QuranFoundationClient":
        timeout = float(config.get("QF_HTTP_TIMEOUT", DEFAULT_TIMEOUT))
        cache = UpstreamTokenCache(
            oauth_base_url=config["QF_OAUTH_BASE_URL"],
            client_id=config.get("QF_CLIENT_ID"),
            client_secret=config.get("QF_CLIENT_SECRET"),
            scope=config.get("QF_SCOPE", "content"),
            safety_margin_seconds=int(config.get("QF_TOKEN_SAFETY_MARGIN", DEFAULT_SAFETY_MARGIN_SECONDS)),
            http=http,
            timeout=timeout,
        )
        return cls(
            cache,
            api_base_url=config["QF_API_BASE_URL"],
            client_id=config.get("QF_CLIENT_ID"),
            http=http,
            timeout=timeout,
        )

    def _get(self, path: str, params: dict | None = None) -> Any:
        if not self._client_id:
            logger.error("QF_CLIENT_ID environment variable is required")
            raise UpstreamConfigurationError()

        headers = {
            "x-auth-token": self.token_cache.get_token(),
            "x-client-id": self._client_id,
            "Content-Type": "application/json",
        }
        url = self._base_url + path
        try:
            if self._http is not None:
                response = self._http.get(url, headers=headers, params=params)
            else:
                response = httpx.get(url, headers=headers, params=params, timeout=self._timeout)
        except httpx.HTTPError as exc:
            logger.error("Quran Foundation request failed: %s", exc)
            raise UpstreamError() from exc

        if response.status_code == 401:
            # token revoked or rotated upstream; force a new one next call
            self.token_cache.clear()
            raise UpstreamUnauthorized()
        if not response.is_success:
            logger.error(
                "Quran Foundation API request failed: %s %s %s",
                response.status_code,
                response.reason_phrase,
                path,
            )
            raise UpstreamError()
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Quran Foundation API returned a non-JSON body for %s", path)
            raise UpstreamError() from exc

    def fetch_chapters(self) -> Any:
        return self._get(CHAPTERS_ENDPOINT)

    def fetch_verses_by_chapter(self, chapter_number: int, **params) -> Any:
        return self._get(f"{VERSES_BY_CHAPTER_ENDPOINT}/{chapter_number}", params=params or None)
