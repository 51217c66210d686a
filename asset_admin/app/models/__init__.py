# app/models/__init__.py
from asset_admin.app import db

# Import models after db
from .category import Category
from .asset import Asset, AssetState
from .user import User, Role, UserRole, RoleName
from .assignment import Assignment, AssignmentState
from .returning_request import ReturningRequest, ReturningRequestState

__all__ = ['db', 'Category', 'Asset', 'AssetState', 'User', 'Role', 'UserRole', 'RoleName',
    'Assignment', 'AssignmentState', 'ReturningRequest', 'ReturningRequestState']
