import atexit
import inspect
import logging
import sys
from urllib.parse import urlparse
from uuid import uuid4

import flask
import sentry_sdk
from flask import Flask, Response, g, request
from loguru import logger
from requests import RequestException
from sentry_sdk.types import Event, Hint
from werkzeug.exceptions import HTTPException, NotFound

from weddingapi.config import get_config
from weddingapi.database import migrate_database
from weddingapi.error_handlers import (
    handle_404_not_found,
    handle_generic_errors,
    handle_http_exception,
    handle_http_request_error,
    handle_missing_search_query,
    handle_registration_error,
    handle_spotify_response_error,
    handle_token_unavailable,
)
from weddingapi.errors import (
    MissingSearchQueryError,
    RegistrationError,
    SpotifyResponseError,
    SpotifyTokenUnavailableError,
)
from weddingapi.spotify import TokenHolder, TokenRefresher


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists.
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message.
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


# https://loguru.readthedocs.io/en/stable/api/logger.html#record
logger.remove()
logger.configure(extra={"request_id": "-"})
logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
logger.add(
    sys.stdout,
    colorize=True,
    format="<level>{level: <8}</level> "
    "| <light-blue>{extra[request_id]}</light-blue> "
    "| <yellow>{name}:{line}</yellow> "
    "| <level>{message}</level>",
)

requests_logger = logging.getLogger("requests.packages.urllib3")
requests_logger.setLevel(logging.DEBUG)
requests_logger.propagate = True

sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
sqlalchemy_logger.setLevel(logging.INFO)
sqlalchemy_logger.propagate = True


def filter_healthchecks(event: Event, _: Hint) -> Event | None:
    url_string = event.get("request", {}).get("url", "")
    parsed_url = urlparse(url_string)

    if parsed_url.path == "/flask-health-check":
        return None

    return event


def create_app(*, start_token_refresher: bool = True) -> Flask:
    config = get_config()  # Loads environment variables
    logger.add(
        config.log_file,
        level=logging.INFO,
        colorize=False,
        rotation="500 MB",
        retention=10,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} "
        "| {extra[request_id]} "
        "| {level: <8} | {name}:{line} | {message}",
    )

    sentry_sdk.init(
        sample_rate=0.5,
        traces_sample_rate=0.1,
        before_send_transaction=filter_healthchecks,
    )

    migrate_database()

    flask_app = flask.Flask(__name__)

    token_holder = TokenHolder()
    flask_app.extensions["token_holder"] = token_holder
    token_refresher = TokenRefresher(
        token_holder,
        config.spotify_client_id,
        config.spotify_client_secret,
        config.token_refresh_interval,
    )
    flask_app.extensions["token_refresher"] = token_refresher
    if start_token_refresher:
        token_refresher.start()
        atexit.register(token_refresher.stop)

    @flask_app.before_request
    def before_request() -> None:
        g.logger = logger.bind(request_id=uuid4().hex[:8])

    @flask_app.after_request
    def allow_cross_origin(response: Response) -> Response:
        response.headers["Access-Control-Allow-Origin"] = config.cors_allowed_origin
        if request.method == "OPTIONS":
            # Preflight, echo back whatever the browser asked for
            response.headers["Access-Control-Allow-Methods"] = request.headers.get(
                "Access-Control-Request-Method", response.headers.get("Allow", "")
            )
            if "Access-Control-Request-Headers" in request.headers:
                response.headers["Access-Control-Allow-Headers"] = request.headers[
                    "Access-Control-Request-Headers"
                ]
        return response

    from weddingapi.routes.register import register
    from weddingapi.routes.root import root
    from weddingapi.routes.search import search

    flask_app.register_blueprint(root)
    flask_app.register_blueprint(search)
    flask_app.register_blueprint(register)

    flask_app.register_error_handler(MissingSearchQueryError, handle_missing_search_query)
    flask_app.register_error_handler(
        SpotifyTokenUnavailableError, handle_token_unavailable
    )
    flask_app.register_error_handler(SpotifyResponseError, handle_spotify_response_error)
    flask_app.register_error_handler(RequestException, handle_http_request_error)
    flask_app.register_error_handler(RegistrationError, handle_registration_error)
    flask_app.register_error_handler(NotFound, handle_404_not_found)
    flask_app.register_error_handler(HTTPException, handle_http_exception)
    flask_app.register_error_handler(Exception, handle_generic_errors)

    return flask_app
