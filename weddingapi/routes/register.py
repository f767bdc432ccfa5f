import re

from flask import Blueprint, g, request
from werkzeug.datastructures import MultiDict

from weddingapi.database import (
    UnexpectedDatabaseError,
    WeddingRegistration,
    get_session,
)
from weddingapi.errors import RegistrationError
from weddingapi.models import Registration

register = Blueprint("register", __name__)

# Optional sign and ASCII digits only, no whitespace or underscores
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def _parse_people(value: str | None) -> int:
    if value is None or not INTEGER_PATTERN.fullmatch(value):
        raise ValueError(f"people is not a whole number: {value!r}")
    return int(value)


def _parse_registration(form: MultiDict) -> Registration:
    return Registration(
        name=form.get("name"),
        amount_of_people=_parse_people(form.get("people")),
        food=",".join(form.getlist("food[]")),
        spotify_id=form.get("spotify-id"),
        track_suggestion=form.get("track-suggestion"),
        other=form.get("other"),
    )


def _store_registration(registration: Registration) -> None:
    with get_session() as db_session:
        new_registration = WeddingRegistration(
            name=registration.name,
            amount=registration.amount_of_people,
            food=registration.food,
            track_suggestion=registration.track_suggestion,
            spotify_id=registration.spotify_id,
            other=registration.other,
        )
        db_session.add(new_registration)
        db_session.flush()
        g.logger.info("Stored registration: {}", new_registration)


@register.route("/wedding/register", methods=["POST"])
def register_guest() -> (str, int):
    try:
        registration = _parse_registration(request.form)
        g.logger.debug("  registration={}", registration)
        _store_registration(registration)
    except (ValueError, TypeError, UnexpectedDatabaseError) as error:
        raise RegistrationError("Unable to store the registration") from error

    return "", 200
