from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort

from api import get_storage
from models.user import User
from models.schemas.user import UserCreateSchema, UserOutSchema
from utils.decorators import jwt_required
from utils.security import hash_password

bp = Blueprint("users", __name__)

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()


def _email_taken(session, email: str, exclude_id: str | None = None) -> bool:
    query = session.query(User).filter(User.email == email)
    if exclude_id:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


@bp.post("/users")
def create_user():
    """
    Register a new user.
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    storage = get_storage()
    if _email_taken(storage.get_session(), data["email"]):
        abort(409, description="Email already registered")

    user = User(email=data["email"], hashed_password=hash_password(data["password"]))
    storage.new(user)
    storage.save()

    return jsonify(user_out_schema.dump(user)), 201


@bp.put("/users")
@jwt_required()
def update_user():
    """
    Update the current user's email and password.
    ---
    tags:
      - Users
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
            email: { type: string }
            password: { type: string }
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    storage = get_storage()
    user = storage.get(User, g.current_user_id)
    if not user:
        # token outlived its user
        abort(404, description="User not found")
    if _email_taken(storage.get_session(), data["email"], exclude_id=user.id):
        abort(409, description="Email already registered")

    user.email = data["email"]
    user.hashed_password = hash_password(data["password"])
    storage.new(user)
    storage.save()

    return jsonify(user_out_schema.dump(user)), 200
