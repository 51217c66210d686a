from flask import request
from flask_login import current_user

from asset_admin.app.auth import admin_required
from asset_admin.app.forms import AssetForm, UpdateAssetForm, validated
from asset_admin.app.routes import assets_bp as bp, paged, success
from asset_admin.app.services import asset_service
from asset_admin.app.services.query import parse_int


@bp.route('/filter')
@admin_required
def filter_assets():
    filters = asset_service.AssetFilters.from_args(request.args)
    return paged(asset_service.filter_assets(current_user.id, filters))


@bp.route('/getAssetById')
@admin_required
def get_asset():
    return success(asset_service.get_asset(current_user.id, parse_int(request.args, 'id')))


@bp.route('/create', methods=['POST'])
@admin_required
def create_asset():
    data = validated(AssetForm())
    return success(asset_service.create_asset(current_user.id, data), 201)


@bp.route('/updateAssetById', methods=['PUT'])
@admin_required
def update_asset():
    data = validated(UpdateAssetForm())
    asset_id = parse_int(request.args, 'id')
    asset_service.update_asset(current_user.id, asset_id, data)
    return success()
