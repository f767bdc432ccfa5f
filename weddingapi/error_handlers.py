from http import HTTPStatus
from uuid import uuid4

from flask import Response, g, jsonify, request
from loguru import logger
from requests import HTTPError, RequestException
from werkzeug.exceptions import HTTPException, NotFound

from weddingapi.errors import (
    MissingSearchQueryError,
    RegistrationError,
    SpotifyResponseError,
    SpotifyTokenUnavailableError,
)


def _request_logger():  # noqa: ANN202
    return g.get("logger", logger)


def handle_missing_search_query(error: MissingSearchQueryError) -> (Response, int):
    _request_logger().info("Search request without a query: {}", request.url)
    return jsonify({"error": str(error)}), HTTPStatus.BAD_REQUEST


def handle_token_unavailable(
    error: SpotifyTokenUnavailableError,
) -> (Response, int):
    _request_logger().warning("Search requested before a Spotify token was fetched")
    return jsonify({"error": str(error)}), HTTPStatus.SERVICE_UNAVAILABLE


def handle_spotify_response_error(error: SpotifyResponseError) -> (Response, int):
    _request_logger().opt(exception=error).error("Unusable response from Spotify")
    return jsonify({"error": "Bad response from Spotify"}), HTTPStatus.BAD_GATEWAY


def handle_http_request_error(error: RequestException) -> (Response, int):
    try:
        if isinstance(error, HTTPError):
            error.add_note(f"Request: {error.request}")
            error.add_note(f"Response: {error.response}")
            error.add_note(f"Response headers: {error.response.headers}")
            error.add_note(f"Response body: {error.response.text}")
        _request_logger().opt(exception=error).error("Spotify request failed")
    except Exception as error_handling_error:  # noqa: BLE001
        logger.exception(error_handling_error)
    finally:
        return (  # noqa: B012
            jsonify({"error": "Unable to reach Spotify"}),
            HTTPStatus.BAD_GATEWAY,
        )


def handle_registration_error(error: RegistrationError) -> (str, int):
    _request_logger().opt(exception=error).error(
        "Something went wrong with storing the registration"
    )
    return "", HTTPStatus.BAD_REQUEST


def handle_404_not_found(_: NotFound) -> (str, int):
    _request_logger().debug("Unknown page requested: {}", request.path)
    return "", HTTPStatus.NOT_FOUND


def handle_http_exception(error: HTTPException) -> (str, int):
    _request_logger().debug("{} {}: {}", request.method, request.path, error)
    return "", error.code


def handle_generic_errors(error: Exception) -> (Response, int):
    error_code = uuid4()
    try:
        error.add_note(f"Error code: {error_code}")
        logger.exception(error)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected exception while handling generic error")
    finally:
        return (  # noqa: B012
            jsonify({"error": "Internal server error", "code": str(error_code)[24:]}),
            HTTPStatus.INTERNAL_SERVER_ERROR,
        )
