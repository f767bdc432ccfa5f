import threading
import time
from datetime import timedelta

import requests
from loguru import logger
from requests import HTTPError
from requests.auth import HTTPBasicAuth

from weddingapi.config import (
    REQUEST_TIMEOUT,
    SPOTIFY_BASE_URL,
    SPOTIFY_SEARCH_LIMIT,
    SPOTIFY_TOKEN_URL,
)
from weddingapi.errors import SpotifyResponseError
from weddingapi.models import TrackResponse

# Index into album.images, Spotify sorts them largest first (640, 300, 64)
ALBUM_IMAGE_INDEX = 2


class TokenHolder:
    """The current client-credentials access token, shared across threads."""

    def __init__(self, token: str | None = None) -> None:
        self._lock = threading.Lock()
        self._token = token

    def get(self) -> str | None:
        with self._lock:
            return self._token

    def set(self, token: str) -> None:
        with self._lock:
            self._token = token


def request_client_credentials(client_id: str, client_secret: str) -> str:
    token_response = requests.post(
        SPOTIFY_TOKEN_URL,
        auth=HTTPBasicAuth(client_id, client_secret),
        headers={
            "Content-Type": "application/x-www-form-urlencoded",
        },
        data={"grant_type": "client_credentials"},
        timeout=REQUEST_TIMEOUT,
    )
    try:
        token_response.raise_for_status()
    except HTTPError as error:
        logger.warning(
            "HTTP Request Failed!\n{}\n{}\n{}",
            error,
            error.response.headers,
            error.response.text,
        )
        raise

    access_token = token_response.json().get("access_token")
    if not access_token:
        raise SpotifyResponseError("Token response did not include an access_token")
    logger.debug(
        "  Token response: expires_in={}", token_response.json().get("expires_in")
    )
    return access_token


class TokenRefresher:
    """Keeps a TokenHolder fresh from a background thread.

    The first refresh happens as soon as the thread starts, after that once
    every ``interval`` at a fixed rate. A failed refresh leaves the previous
    token in place and the next tick tries again.
    """

    def __init__(
        self,
        token_holder: TokenHolder,
        client_id: str,
        client_secret: str,
        interval: timedelta,
    ) -> None:
        if interval <= timedelta(0):
            raise ValueError(f"Refresh interval must be positive, got {interval}")
        self._token_holder = token_holder
        self._client_id = client_id
        self._client_secret = client_secret
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="spotify-token-refresher", daemon=True
        )

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def refresh(self) -> None:
        logger.info("Fetching new Spotify access token")
        try:
            access_token = request_client_credentials(
                self._client_id, self._client_secret
            )
        except Exception:  # noqa: BLE001
            logger.exception("Unable to refresh Spotify access token")
            return
        self._token_holder.set(access_token)
        logger.info("Spotify access token refreshed")

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread.is_alive():
            self._thread.join(timeout)

    def _run(self) -> None:
        next_run = time.monotonic()
        while True:
            self.refresh()
            next_run += self._interval.total_seconds()
            if self._stop_event.wait(max(0.0, next_run - time.monotonic())):
                break


def search_tracks(query: str, access_token: str) -> list[TrackResponse]:
    # https://developer.spotify.com/documentation/web-api/reference/search
    search_response = requests.get(
        url=f"{SPOTIFY_BASE_URL}/search",
        params={"q": query, "type": "track", "limit": SPOTIFY_SEARCH_LIMIT},
        headers={"Authorization": f"Bearer {access_token}"},
        timeout=REQUEST_TIMEOUT,
    )
    search_response.raise_for_status()

    rjson = search_response.json()
    try:
        return [
            TrackResponse(
                id=track["id"],
                artist=track["artists"][0]["name"],
                title=track["name"],
                image_url=track["album"]["images"][ALBUM_IMAGE_INDEX]["url"],
            )
            for track in rjson["tracks"]["items"]
        ]
    except (KeyError, IndexError, TypeError) as error:
        raise SpotifyResponseError("Unexpected search response from Spotify") from error
