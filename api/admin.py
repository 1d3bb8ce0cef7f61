"""
Admin blueprint:
- GET  /metrics  file server hit count as HTML
- POST /reset    dev only: delete every user and zero the hit counter
"""
from flask import Blueprint, current_app, abort
import logging

from api import get_hits, get_storage
from models.user import User

logger = logging.getLogger(__name__)

bp = Blueprint("admin", __name__)

METRICS_MARKUP = """<html>
  <body>
    <h1>Welcome, Chirpy Admin</h1>
    <p>Chirpy has been visited {hits} times!</p>
  </body>
</html>
"""


@bp.get("/metrics")
def metrics():
    """
    File server hit count
    ---
    tags:
      - Admin
    produces:
      - text/html
    responses:
      200: { description: OK }
    """
    body = METRICS_MARKUP.format(hits=get_hits().value)
    return body, 200, {"Content-Type": "text/html; charset=utf-8"}


@bp.post("/reset")
def reset():
    """
    Delete all users (chirps and refresh tokens cascade) and reset metrics.
    Only available when PLATFORM is "dev".
    ---
    tags:
      - Admin
    responses:
      200: { description: Reset }
      403: { description: Forbidden }
    """
    if current_app.config.get("PLATFORM") != "dev":
        abort(403, description="Forbidden")

    deleted = get_storage().delete_all(User)
    get_hits().reset()
    logger.warning("admin reset: removed %d users", deleted)
    return {"users_deleted": deleted, "hits": 0}, 200
