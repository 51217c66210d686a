from flask import request
from flask_login import current_user, login_required

from asset_admin.app.auth import admin_required
from asset_admin.app.routes import paged, returning_requests_bp as bp, success
from asset_admin.app.services import returning_request_service as service


@bp.route('/filter')
@admin_required
def filter_returning_requests():
    filters = service.ReturningRequestFilters.from_args(request.args)
    return paged(service.filter_returning_requests(current_user.id, filters))


@bp.route('/<int:assignment_id>', methods=['POST'])
@admin_required
def create_request(assignment_id):
    return success(service.create_request_by_admin(current_user.id, assignment_id), 201)


@bp.route('/my/<int:assignment_id>', methods=['POST'])
@login_required
def create_my_request(assignment_id):
    return success(service.create_request_by_account(current_user.id, assignment_id), 201)


@bp.route('/<int:id>/complete', methods=['PUT'])
@admin_required
def complete_request(id):
    return success(service.complete_request(current_user.id, id))


@bp.route('/<int:id>', methods=['DELETE'])
@admin_required
def cancel_request(id):
    service.cancel_request(current_user.id, id)
    return success(True)
