from __future__ import annotations
from functools import wraps
from flask import request, g, current_app


def jwt_required():
    """Authenticate the bearer access token and expose the caller as g.current_user_id.

    Any failure raises AuthFailure, which the app renders as 401.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            sessions = current_app.extensions["chirpy.sessions"]
            g.current_user_id = sessions.authenticate(request.headers.get("Authorization"))
            return fn(*args, **kwargs)

        return wrapper

    return decorator
