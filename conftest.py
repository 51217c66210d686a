"""
Pytest configuration and fixtures for the asset admin API
"""
import itertools
from datetime import date, datetime

import pytest

from asset_admin.app import create_app
from asset_admin.app import db as _db
from asset_admin.app.models import (Asset, AssetState, Assignment, AssignmentState, Category, ReturningRequest,
                                    ReturningRequestState, Role, RoleName, User)
from asset_admin.config import TestConfig


@pytest.fixture(scope='function')
def app():
    """Create Flask application for testing, backed by an in-memory database"""
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


class Builder:
    """Inserts rows in their own app context and hands back primary keys."""

    def __init__(self, app):
        self.app = app
        self._seq = itertools.count(1)

    def category(self, name=None, prefix=None):
        n = next(self._seq)
        with self.app.app_context():
            category = Category(
                name=name or f'Category {n}',
                prefix=prefix or f'{chr(65 + (n // 26) % 26)}{chr(65 + n % 26)}',
            )
            _db.session.add(category)
            _db.session.commit()
            return category.id

    def user(self, username=None, location='HCM', admin=False, disabled=False, first_name='Test',
             last_name=None, joined_date=date(2020, 1, 1), password='password'):
        n = next(self._seq)
        with self.app.app_context():
            role_name = RoleName.ADMIN if admin else RoleName.STAFF
            user = User(
                username=username or f'user{n}',
                first_name=first_name,
                last_name=last_name or f'User {n}',
                staff_code=f'SD{n:04d}',
                date_of_birth=date(1990, 1, 1),
                joined_date=joined_date,
                location=location,
                is_disabled=disabled,
            )
            user.set_password(password)
            user.set_roles([Role.query.filter_by(name=role_name.value).one()])
            _db.session.add(user)
            _db.session.commit()
            return user.id

    def asset(self, category_id=None, name='Laptop', location='HCM', state=AssetState.AVAILABLE):
        category_id = category_id or self.category()
        n = next(self._seq)
        with self.app.app_context():
            prefix = _db.session.get(Category, category_id).prefix
            asset = Asset(
                asset_code=f'{prefix}{n:06d}',
                category_id=category_id,
                name=name,
                location=location,
                state=state,
                specification='Core i5, 8GB RAM',
                installed_date=date(2021, 6, 1),
            )
            _db.session.add(asset)
            _db.session.commit()
            return asset.id

    def assignment(self, asset_id, assigned_to_id, assigned_by_id, state=AssignmentState.ACCEPTED,
                   assigned_date=None):
        with self.app.app_context():
            assignment = Assignment(
                asset_id=asset_id,
                assigned_to_id=assigned_to_id,
                assigned_by_id=assigned_by_id,
                assigned_date=assigned_date or datetime(2024, 3, 1, 9, 30),
                state=state.value,
            )
            asset = _db.session.get(Asset, asset_id)
            asset.state = AssetState.NOT_AVAILABLE.value
            _db.session.add(assignment)
            _db.session.commit()
            return assignment.id

    def returning_request(self, assignment_id, requested_by_id):
        with self.app.app_context():
            assignment = _db.session.get(Assignment, assignment_id)
            assignment.state = AssignmentState.WAITING_FOR_RETURNING.value
            request = ReturningRequest(
                assignment_id=assignment_id,
                requested_by_id=requested_by_id,
                state=ReturningRequestState.WAITING_FOR_RETURNING.value,
            )
            _db.session.add(request)
            _db.session.commit()
            return request.id

    def headers(self, user_id):
        """Authorization header carrying a fresh token for ``user_id``"""
        with self.app.app_context():
            token = _db.session.get(User, user_id).get_auth_token()
        return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def build(app):
    return Builder(app)


@pytest.fixture(scope='function')
def admin_id(build):
    return build.user(username='admin', admin=True, first_name='Site', last_name='Admin')


@pytest.fixture(scope='function')
def admin_headers(build, admin_id):
    return build.headers(admin_id)
