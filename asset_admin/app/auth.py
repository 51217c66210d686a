"""Bearer-token authentication on top of Flask-Login."""
from functools import wraps

from flask import request
from flask_login import current_user, login_required

from asset_admin.app.errors import ForbiddenError, UnauthorizedError
from asset_admin.app.logger import get_logger

logger = get_logger("asset_admin.auth")


def token_from_request(req):
    header = req.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def init_auth(login_manager):
    from asset_admin.app.models import User

    @login_manager.request_loader
    def load_user_from_request(req):
        token = token_from_request(req)
        if token is None:
            return None
        user = User.verify_auth_token(token)
        if user is None or user.is_disabled:
            logger.info("Rejected token for %s", req.path)
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        raise UnauthorizedError("Missing, invalid or expired token")


def admin_required(func):
    """login_required plus the Admin role."""
    @wraps(func)
    @login_required
    def wrapper(*args, **kwargs):
        if not current_user.is_admin:
            logger.info("User %s denied admin endpoint %s", current_user.username, request.path)
            raise ForbiddenError("You do not have permission to perform this action.")
        return func(*args, **kwargs)
    return wrapper
