"""Error taxonomy and the JSON error envelope.

Services raise these; the handlers registered on the app turn them into
``{"isSuccess": false, "error": {...}, "result": null}`` responses.
"""
from datetime import datetime
from functools import wraps

from flask import jsonify
from werkzeug.exceptions import HTTPException

from asset_admin.app.logger import get_logger

logger = get_logger("asset_admin.errors")


class AssetManagementError(Exception):
    status_code = 500
    title = "Internal Server Error"

    def __init__(self, message=None, status_code=None, title=None):
        super().__init__(message or self.title)
        self.message = message or self.title
        if status_code is not None:
            self.status_code = status_code
        if title is not None:
            self.title = title

    def to_dict(self):
        return {
            'statusCode': self.status_code,
            'title': self.title,
            'message': self.message,
        }


class BadRequestError(AssetManagementError):
    status_code = 400
    title = "Bad Request"


class UnauthorizedError(AssetManagementError):
    status_code = 401
    title = "Unauthorized"


class ForbiddenError(AssetManagementError):
    status_code = 403
    title = "Forbidden"


class NotFoundError(AssetManagementError):
    status_code = 404
    title = "Not Found"


class ServiceError(AssetManagementError):
    """Generic failure that hides the original exception detail."""


# Messages shared by several services
USER_NOT_LOGIN = "User is not logged in"
USER_IS_DISABLED = "Your account is disabled"


def log_failures(func):
    """Log unexpected errors raised by a service function and re-raise them as ServiceError.

    Typed AssetManagementError subclasses pass through untouched.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AssetManagementError:
            raise
        except Exception as e:
            logger.error("Error when execute %s method.\nDate: %s.\nDetail: %s",
                         func.__name__, datetime.utcnow().isoformat(), e)
            raise ServiceError(f"Error when execute {func.__name__} method") from e
    return wrapper


def error_envelope(error):
    return {'isSuccess': False, 'error': error.to_dict(), 'result': None}


def register_error_handlers(app):
    from asset_admin.app import db

    @app.errorhandler(AssetManagementError)
    def handle_asset_management_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            logger.error("%s: %s", type(error).__name__, error.message)
        return jsonify(error_envelope(error)), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        wrapped = AssetManagementError(error.description, error.code, error.name)
        return jsonify(error_envelope(wrapped)), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception("Unhandled error: %s", error)
        wrapped = ServiceError("An unexpected error occurred")
        return jsonify(error_envelope(wrapped)), 500
