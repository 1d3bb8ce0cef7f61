from __future__ import annotations

import uuid

from flask import Blueprint, request, jsonify, g, abort

from api import get_storage
from models.chirp import Chirp, MAX_CHIRP_LENGTH
from models.schemas.chirp import ChirpCreateSchema, ChirpOutSchema
from utils.decorators import jwt_required
from utils.moderation import clean_body

bp = Blueprint("chirps", __name__)

chirp_create_schema = ChirpCreateSchema()
chirp_out_schema = ChirpOutSchema()
chirp_list_out_schema = ChirpOutSchema(many=True)


def _get_chirp_or_404(chirp_id: str) -> Chirp:
    try:
        chirp_id = str(uuid.UUID(chirp_id))
    except ValueError:
        abort(404, description="Chirp not found")
    chirp = get_storage().get(Chirp, chirp_id)
    if not chirp:
        abort(404, description="Chirp not found")
    return chirp


@bp.get("/chirps")
def list_chirps():
    """
    List all chirps, oldest first
    ---
    tags:
      - Chirps
    responses:
      200: { description: OK }
    """
    session = get_storage().get_session()
    rows = session.query(Chirp).order_by(Chirp.created_at.asc()).all()
    return jsonify(chirp_list_out_schema.dump(rows)), 200


@bp.get("/chirps/<chirp_id>")
def get_chirp(chirp_id: str):
    """
    Get a chirp
    ---
    tags:
      - Chirps
    parameters:
      - in: path
        name: chirp_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    return jsonify(chirp_out_schema.dump(_get_chirp_or_404(chirp_id))), 200


@bp.post("/chirps")
@jwt_required()
def create_chirp():
    """
    Post a chirp as the current user
    ---
    tags:
      - Chirps
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            body: { type: string }
    responses:
      201: { description: Created }
      400: { description: Chirp is too long }
      401: { description: Unauthorized }
    """
    payload = request.get_json(silent=True) or {}
    data = chirp_create_schema.load(payload)
    if len(data["body"]) > MAX_CHIRP_LENGTH:
        abort(400, description="Chirp is too long")

    chirp = Chirp(body=clean_body(data["body"]), user_id=g.current_user_id)
    storage = get_storage()
    storage.new(chirp)
    storage.save()
    return jsonify(chirp_out_schema.dump(chirp)), 201


@bp.delete("/chirps/<chirp_id>")
@jwt_required()
def delete_chirp(chirp_id: str):
    """
    Delete one of your own chirps
    ---
    tags:
      - Chirps
    security:
      - Bearer: []
    parameters:
      - in: path
        name: chirp_id
        type: string
        required: true
    responses:
      204: { description: Deleted }
      403: { description: Not the author }
      404: { description: Not found }
    """
    chirp = _get_chirp_or_404(chirp_id)
    if chirp.user_id != g.current_user_id:
        abort(403, description="You can only delete your own chirps")

    storage = get_storage()
    storage.delete(chirp)
    storage.save()
    return ("", 204)
