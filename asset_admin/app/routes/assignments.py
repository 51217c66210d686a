from flask import request
from flask_login import current_user, login_required

from asset_admin.app.auth import admin_required
from asset_admin.app.forms import AssignmentForm, RespondAssignmentForm, validated
from asset_admin.app.routes import assignments_bp as bp, paged, success
from asset_admin.app.services import assignment_service


@bp.route('/filter')
@admin_required
def filter_assignments():
    filters = assignment_service.AssignmentFilters.from_args(request.args)
    return paged(assignment_service.filter_assignments(current_user.id, filters))


@bp.route('', methods=['POST'])
@admin_required
def create_assignment():
    data = validated(AssignmentForm())
    return success(assignment_service.create_assignment(current_user.id, data), 201)


@bp.route('/my')
@login_required
def my_assignments():
    filters = assignment_service.MyAssignmentFilters.from_args(request.args)
    return paged(assignment_service.my_assignments(current_user.id, filters))


@bp.route('/<int:id>/respond', methods=['PUT'])
@login_required
def respond_to_assignment(id):
    data = validated(RespondAssignmentForm())
    return success(assignment_service.respond_to_assignment(current_user.id, id, data['accepted']))
