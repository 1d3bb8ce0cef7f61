"""
Authentication blueprint:
- POST /login
- POST /refresh
- POST /revoke

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived stateless access tokens (JWTs signed with HS256)
- Issues opaque refresh tokens stored in the DB so they can be revoked
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from api import get_sessions
from models.schemas.user import UserLoginSchema, LoginOutSchema

bp = Blueprint("auth", __name__)

user_login_schema = UserLoginSchema()
login_out_schema = LoginOutSchema()


@bp.post("/login")
def login():
    """
    Login: return the user with an access token and a refresh token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Unauthorized
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    result = get_sessions().login(data["email"], data["password"])
    user = result.user
    return jsonify(
        login_out_schema.dump(
            {
                "id": user.id,
                "created_at": user.created_at,
                "updated_at": user.updated_at,
                "email": user.email,
                "token": result.access_token,
                "refresh_token": result.refresh_token,
            }
        )
    ), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange a refresh token (Authorization: Bearer) for a new access token
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    token = get_sessions().refresh(request.headers.get("Authorization"))
    return jsonify({"token": token}), 200


@bp.post("/revoke")
def revoke():
    """
    Revoke a refresh token. Succeeds for already revoked or unknown tokens.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      204:
        description: ""
      401:
        description: Missing or malformed Authorization header
    """
    get_sessions().revoke(request.headers.get("Authorization"))
    return ("", 204)
