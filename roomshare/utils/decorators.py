from functools import wraps
from flask import request, jsonify
import jwt
from roomshare.errors import RoomshareError
from roomshare.services.user_service import UserService

def _bearer_token():
    auth_header = request.headers.get('Authorization', '')
    # Bearer <token>
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return None

def _resolve_user(token):
    try:
        return UserService.user_from_token(token), None
    except (jwt.InvalidTokenError, KeyError, RoomshareError) as e:
        return None, str(e)

def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({'error': 'Token is missing!'}), 401

        current_user, error = _resolve_user(token)
        if current_user is None:
            return jsonify({'error': 'Token is invalid!', 'details': error}), 401
        if not current_user.active:
            return jsonify({'error': 'This account has been suspended.'}), 403

        return f(current_user, *args, **kwargs)

    return decorated

def optional_token(f):
    """Like token_required, but anonymous visitors get current_user=None."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return f(None, *args, **kwargs)
        return token_required(f)(*args, **kwargs)

    return decorated

def roles_required(*roles):
    """
    Must be stacked under token_required, which passes current_user as the first argument:

        @token_required
        @roles_required('owner', 'admin')
        def view(current_user): ...
    """
    def decorator(f):
        @wraps(f)
        def decorated(current_user, *args, **kwargs):
            if current_user.role not in roles:
                return jsonify({'error': f"Requires role: {', '.join(roles)}"}), 403
            return f(current_user, *args, **kwargs)
        return decorated
    return decorator

def admin_required(f):
    return roles_required('admin')(f)
