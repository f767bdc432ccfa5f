from flask import Blueprint

root = Blueprint("root", __name__)


@root.route("/flask-health-check")
def flask_health_check() -> str:
    return "success"
