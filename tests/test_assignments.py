import json
from datetime import datetime

import pytest
from sqlalchemy import update

from asset_admin.app import db
from asset_admin.app.errors import BadRequestError
from asset_admin.app.models import Asset, AssetState, Assignment, AssignmentState
from asset_admin.app.services import assignment_service


def test_create_assignment(client, app, build, admin_headers):
    user_id = build.user(username='holder')
    asset_id = build.asset()

    response = client.post('/api/assignment', headers=admin_headers, json={
        'user_id': user_id, 'asset_id': asset_id, 'note': 'For onboarding', 'assigned_date': '2024-05-06',
    })
    assert response.status_code == 201
    result = response.get_json()['result']
    assert result['state'] == 'WaitingForAcceptance'
    assert result['assignedTo'] == 'holder'
    assert result['assignedBy'] == 'admin'
    assert result['assignedDate'].startswith('2024-05-06')

    with app.app_context():
        assert db.session.get(Asset, asset_id).state == AssetState.NOT_AVAILABLE.value


def test_create_assignment_for_unavailable_asset(client, app, build, admin_headers):
    user_id = build.user()
    asset_id = build.asset(state=AssetState.NOT_AVAILABLE)

    response = client.post('/api/assignment', headers=admin_headers,
                           json={'user_id': user_id, 'asset_id': asset_id})
    assert response.status_code == 400
    with app.app_context():
        assert Assignment.query.count() == 0


def test_create_assignment_for_disabled_user(client, build, admin_headers):
    user_id = build.user(disabled=True)

    response = client.post('/api/assignment', headers=admin_headers,
                           json={'user_id': user_id, 'asset_id': build.asset()})
    assert response.status_code == 400


def test_create_assignment_unknown_asset(client, build, admin_headers):
    response = client.post('/api/assignment', headers=admin_headers,
                           json={'user_id': build.user(), 'asset_id': 999})
    assert response.status_code == 404


def test_same_asset_cannot_be_assigned_twice(app, build, admin_id):
    asset_id = build.asset()
    first_user, second_user = build.user(), build.user()

    with app.app_context():
        assignment_service.create_assignment(admin_id, {'user_id': first_user, 'asset_id': asset_id})
        with pytest.raises(BadRequestError):
            assignment_service.create_assignment(admin_id, {'user_id': second_user, 'asset_id': asset_id})
        assert Assignment.query.filter_by(asset_id=asset_id).count() == 1


def test_lost_race_leaves_no_assignment(app, build, admin_id, monkeypatch):
    asset_id = build.asset()
    user_id = build.user()

    # Another request takes the asset between the availability check and the update
    def check_then_lose(asset_ident):
        asset = db.session.get(Asset, asset_ident)
        db.session.execute(
            update(Asset).where(Asset.id == asset_ident).values(state=AssetState.NOT_AVAILABLE.value)
        )
        return asset

    monkeypatch.setattr(assignment_service, '_get_asset_to_assign', check_then_lose)

    with app.app_context():
        with pytest.raises(BadRequestError):
            assignment_service.create_assignment(admin_id, {'user_id': user_id, 'asset_id': asset_id})
        assert Assignment.query.count() == 0


def test_accept_assignment(client, app, build, admin_id):
    user_id = build.user()
    asset_id = build.asset()
    assignment_id = build.assignment(asset_id, user_id, admin_id, state=AssignmentState.WAITING_FOR_ACCEPTANCE)

    response = client.put(f'/api/assignment/{assignment_id}/respond', headers=build.headers(user_id),
                          json={'accepted': True})
    assert response.status_code == 200
    assert response.get_json()['result']['state'] == 'Accepted'
    with app.app_context():
        assert db.session.get(Asset, asset_id).state == AssetState.NOT_AVAILABLE.value


def test_decline_assignment_frees_asset(client, app, build, admin_id):
    user_id = build.user()
    asset_id = build.asset()
    assignment_id = build.assignment(asset_id, user_id, admin_id, state=AssignmentState.WAITING_FOR_ACCEPTANCE)

    response = client.put(f'/api/assignment/{assignment_id}/respond', headers=build.headers(user_id),
                          json={'accepted': False})
    assert response.status_code == 200
    assert response.get_json()['result']['state'] == 'Declined'
    with app.app_context():
        assert db.session.get(Asset, asset_id).state == AssetState.AVAILABLE.value


def test_respond_requires_answer(client, build, admin_id):
    user_id = build.user()
    assignment_id = build.assignment(build.asset(), user_id, admin_id,
                                     state=AssignmentState.WAITING_FOR_ACCEPTANCE)

    response = client.put(f'/api/assignment/{assignment_id}/respond', headers=build.headers(user_id), json={})
    assert response.status_code == 400


def test_respond_to_someone_elses_assignment(client, build, admin_id):
    owner, other = build.user(), build.user()
    assignment_id = build.assignment(build.asset(), owner, admin_id, state=AssignmentState.WAITING_FOR_ACCEPTANCE)

    response = client.put(f'/api/assignment/{assignment_id}/respond', headers=build.headers(other),
                          json={'accepted': True})
    assert response.status_code == 404


def test_respond_twice(client, build, admin_id):
    user_id = build.user()
    assignment_id = build.assignment(build.asset(), user_id, admin_id, state=AssignmentState.ACCEPTED)

    response = client.put(f'/api/assignment/{assignment_id}/respond', headers=build.headers(user_id),
                          json={'accepted': False})
    assert response.status_code == 400


def test_filter_assignments(client, build, admin_id, admin_headers):
    alice, bob = build.user(username='alice'), build.user(username='bob')
    build.assignment(build.asset(name='Laptop'), alice, admin_id, assigned_date=datetime(2024, 3, 1, 8, 0))
    build.assignment(build.asset(name='Mouse'), bob, admin_id, assigned_date=datetime(2024, 3, 2, 17, 45),
                     state=AssignmentState.WAITING_FOR_ACCEPTANCE)
    build.assignment(build.asset(name='Desk', location='HN'), bob, admin_id)

    response = client.get('/api/assignment/filter', headers=admin_headers)
    rows = response.get_json()['result']
    # Newest assignment first by default
    assert [row['assetName'] for row in rows] == ['Mouse', 'Laptop']
    assert json.loads(response.headers['X-Pagination'])['totalItemCount'] == 2

    response = client.get('/api/assignment/filter?assignedDate=2024-03-02', headers=admin_headers)
    assert [row['assetName'] for row in response.get_json()['result']] == ['Mouse']

    response = client.get('/api/assignment/filter?search=ALICE', headers=admin_headers)
    assert [row['assignedTo'] for row in response.get_json()['result']] == ['alice']

    response = client.get('/api/assignment/filter?states=Accepted&sortAssetName=Asc', headers=admin_headers)
    assert [row['assetName'] for row in response.get_json()['result']] == ['Laptop']


def test_my_assignments(client, build, admin_id):
    user_id = build.user()
    other_id = build.user()
    build.assignment(build.asset(name='Laptop'), user_id, admin_id)
    build.assignment(build.asset(name='Phone'), user_id, admin_id, state=AssignmentState.RETURNED)
    build.assignment(build.asset(name='Tablet'), user_id, admin_id, assigned_date=datetime(2999, 1, 1))
    build.assignment(build.asset(name='Mouse'), other_id, admin_id)

    response = client.get('/api/assignment/my', headers=build.headers(user_id))
    assert response.status_code == 200
    rows = response.get_json()['result']
    assert [row['assetName'] for row in rows] == ['Laptop']
    assert rows[0]['category'].startswith('Category')


def test_sort_assignments_by_state_follows_lifecycle(client, build, admin_id, admin_headers):
    user_id = build.user()
    for state in (AssignmentState.RETURNED, AssignmentState.WAITING_FOR_ACCEPTANCE, AssignmentState.ACCEPTED):
        build.assignment(build.asset(), user_id, admin_id, state=state)

    response = client.get('/api/assignment/filter?sortState=Asc', headers=admin_headers)
    states = [row['state'] for row in response.get_json()['result']]
    assert states == ['WaitingForAcceptance', 'Accepted', 'Returned']

    response = client.get('/api/assignment/filter?sortState=Desc', headers=admin_headers)
    states = [row['state'] for row in response.get_json()['result']]
    assert states == ['Returned', 'Accepted', 'WaitingForAcceptance']


def test_my_assignments_include_one_made_just_now(client, build, admin_id):
    user_id = build.user()
    build.assignment(build.asset(name='Headset'), user_id, admin_id, assigned_date=datetime.utcnow())

    response = client.get('/api/assignment/my', headers=build.headers(user_id))
    assert [row['assetName'] for row in response.get_json()['result']] == ['Headset']
