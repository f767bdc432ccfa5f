import os
from datetime import timedelta

from loguru import logger

SPOTIFY_BASE_URL = "https://api.spotify.com/v1"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"  # noqa: S105
SPOTIFY_SEARCH_LIMIT = 5

# Seconds, applies to every outbound Spotify request
REQUEST_TIMEOUT = 10


class MissingEnvironmentVariableError(Exception):
    def __init__(self, variable_name: str) -> None:
        super().__init__(f"No {variable_name} environment variable provided")


class InvalidEnvironmentVariableError(Exception):
    def __init__(self, variable_name: str, value: str) -> None:
        super().__init__(f"Invalid {variable_name} environment variable: {value!r}")


class Config:
    def __init__(self) -> None:
        self._log_file: str = os.environ.get(
            "LOG_FILE", "/opt/weddingapi/weddingapi.log"
        )
        logger.debug("logfile={}", self._log_file)

        self._spotify_client_id: str = os.environ.get("SPOTIFY_CLIENT_ID", "")
        if not self._spotify_client_id:
            raise MissingEnvironmentVariableError("SPOTIFY_CLIENT_ID")
        logger.debug("spotify_client_id={}", self._spotify_client_id)

        self._spotify_client_secret: str = os.environ.get("SPOTIFY_CLIENT_SECRET", "")
        if not self._spotify_client_secret:
            raise MissingEnvironmentVariableError("SPOTIFY_CLIENT_SECRET")
        logger.debug("SPOTIFY_CLIENT_SECRET defined (not shown)")

        self._database_url: str = os.environ.get("DATABASE_URL", "")
        if not self._database_url:
            raise MissingEnvironmentVariableError("DATABASE_URL")
        logger.debug("DATABASE_URL defined (not shown)")

        refresh_minutes = os.environ.get("SPOTIFY_TOKEN_REFRESH_MINUTES", "30")
        if not refresh_minutes.isdecimal() or int(refresh_minutes) <= 0:
            raise InvalidEnvironmentVariableError(
                "SPOTIFY_TOKEN_REFRESH_MINUTES", refresh_minutes
            )
        self._token_refresh_interval = timedelta(minutes=int(refresh_minutes))
        logger.debug("token_refresh_interval={}", self._token_refresh_interval)

        self._cors_allowed_origin: str = os.environ.get("CORS_ALLOWED_ORIGIN", "*")
        logger.debug("cors_allowed_origin={}", self._cors_allowed_origin)

    @property
    def log_file(self) -> str:
        return self._log_file

    @property
    def spotify_client_id(self) -> str:
        return self._spotify_client_id

    @property
    def spotify_client_secret(self) -> str:
        return self._spotify_client_secret

    @property
    def database_url(self) -> str:
        return self._database_url

    @property
    def token_refresh_interval(self) -> timedelta:
        return self._token_refresh_interval

    @property
    def cors_allowed_origin(self) -> str:
        return self._cors_allowed_origin


_config: Config | None = None


def get_config() -> Config:
    global _config  # noqa: PLW0603
    if not _config:
        _config = Config()
    return _config
