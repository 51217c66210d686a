from flask import Blueprint, request
from flask_login import current_user, login_required

from asset_admin.app.auth import admin_required
from asset_admin.app.forms import ChangePasswordForm, LoginForm, UpdateUserForm, UserForm, validated
from asset_admin.app.routes import paged, success
from asset_admin.app.services import user_service
from asset_admin.app.services.query import parse_int

users_bp = Blueprint('users', __name__, url_prefix='/api/user')
auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/login', methods=['POST'])
def login():
    form = validated(LoginForm())
    return success(user_service.authenticate(form['username'], form['password']))


@auth_bp.route('/changePassword', methods=['POST'])
@login_required
def change_password():
    form = validated(ChangePasswordForm())
    user_service.change_password(current_user.id, form['old_password'], form['new_password'])
    return success(True)


@auth_bp.route('/me')
@login_required
def me():
    return success(user_service.get_user(current_user.id))


@users_bp.route('/filter')
@admin_required
def filter_users():
    filters = user_service.UserFilters.from_args(request.args)
    return paged(user_service.filter_users(current_user.id, filters))


@users_bp.route('/disable', methods=['PUT'])
@admin_required
def disable_user():
    return success(user_service.disable_user(parse_int(request.args, 'userId')))


@users_bp.route('/<int:id>')
@admin_required
def get_user(id):
    return success(user_service.get_user(id))


@users_bp.route('', methods=['POST'])
@admin_required
def create_user():
    data = validated(UserForm())
    return success(user_service.create_user(current_user.id, data), 201)


@users_bp.route('/<int:id>', methods=['PUT'])
@admin_required
def update_user(id):
    data = validated(UpdateUserForm())
    return success(user_service.update_user(id, data))
