# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, g

ACTOR_HEADER = "X-Actor-Id"
MAX_ACTOR_ID_LENGTH = 64


def with_actor(f):
    """
    Attach the caller id supplied by the authenticating gateway.

    Sets g.actor_id from the X-Actor-Id header (None when absent). The id is
    only used to attribute AdminAction rows; it is never trusted for access
    decisions here.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        actor = (request.headers.get(ACTOR_HEADER) or "").strip()
        if len(actor) > MAX_ACTOR_ID_LENGTH:
            return {"error": f"{ACTOR_HEADER} exceeds max length {MAX_ACTOR_ID_LENGTH}"}, 400
        g.actor_id = actor or None
        return f(*args, **kwargs)

    return decorated_function
