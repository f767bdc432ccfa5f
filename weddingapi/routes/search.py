from flask import Blueprint, current_app, g, jsonify, request
from werkzeug.wrappers.response import Response

from weddingapi.errors import MissingSearchQueryError, SpotifyTokenUnavailableError
from weddingapi.spotify import TokenHolder, search_tracks

search = Blueprint("search", __name__)


@search.route("/wedding/search")
def search_songs() -> Response:
    query = request.args.get("query")
    g.logger.debug("query: {}", query)
    if not query:
        raise MissingSearchQueryError

    token_holder: TokenHolder = current_app.extensions["token_holder"]
    access_token = token_holder.get()
    if not access_token:
        raise SpotifyTokenUnavailableError

    tracks = search_tracks(query, access_token)
    g.logger.debug("  {} tracks found", len(tracks))

    return jsonify([track.to_json() for track in tracks])
