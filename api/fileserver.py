from flask import Blueprint, current_app, send_from_directory

from api import get_hits

bp = Blueprint("fileserver", __name__)


@bp.before_request
def count_hit():
    get_hits().increment()


@bp.get("/")
def index():
    return send_from_directory(current_app.config["FILESERVER_ROOT"], "index.html")


@bp.get("/<path:filename>")
def serve(filename: str):
    """Static files from FILESERVER_ROOT."""
    return send_from_directory(current_app.config["FILESERVER_ROOT"], filename)
