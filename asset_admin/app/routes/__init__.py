# app/routes/__init__.py
from flask import Blueprint, current_app, jsonify

# Create blueprints
assets_bp = Blueprint('assets', __name__, url_prefix='/api/asset')
categories_bp = Blueprint('categories', __name__, url_prefix='/api/category')
assignments_bp = Blueprint('assignments', __name__, url_prefix='/api/assignment')
returning_requests_bp = Blueprint('returning_requests', __name__, url_prefix='/api/returningRequest')


def success(result=None, status=200):
    return jsonify({'isSuccess': True, 'error': None, 'result': result}), status


def paged(page):
    """Envelope for a list page, with the paging metadata in X-Pagination."""
    response = jsonify({'isSuccess': True, 'error': None, 'result': page.items})
    response.headers['X-Pagination'] = page.metadata_json()
    response.headers['Access-Control-Expose-Headers'] = 'X-Pagination'
    return response


def add_cors_headers(response):
    response.headers.setdefault('Access-Control-Allow-Origin', current_app.config.get('CORS_ORIGIN', '*'))
    response.headers.setdefault('Access-Control-Allow-Headers', 'Authorization, Content-Type')
    response.headers.setdefault('Access-Control-Allow-Methods', 'GET, POST, PUT, DELETE, OPTIONS')
    return response


# Import views after blueprints are created
from . import assets, categories, assignments, returning_requests  # noqa: E402,F401
