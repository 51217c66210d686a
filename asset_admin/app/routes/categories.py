from asset_admin.app.auth import admin_required
from asset_admin.app.forms import CategoryForm, validated
from asset_admin.app.routes import categories_bp as bp, success
from asset_admin.app.services import category_service


@bp.route('', methods=['GET'])
@admin_required
def list_categories():
    return success(category_service.list_categories())


@bp.route('', methods=['POST'])
@admin_required
def create_category():
    data = validated(CategoryForm())
    return success(category_service.create_category(data['name'], data['prefix']), 201)
