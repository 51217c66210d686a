from datetime import date

from asset_admin.app import db
from asset_admin.app.models import (Asset, AssetState, Assignment, AssignmentState, ReturningRequest,
                                    ReturningRequestState)


def test_admin_creates_returning_request(client, app, build, admin_id, admin_headers):
    assignment_id = build.assignment(build.asset(), build.user(), admin_id)

    response = client.post(f'/api/returningRequest/{assignment_id}', headers=admin_headers)
    assert response.status_code == 201
    result = response.get_json()['result']
    assert result['state'] == 'WaitingForReturning'
    assert result['requestedBy'] == 'admin'
    assert result['acceptedBy'] is None

    with app.app_context():
        assignment = db.session.get(Assignment, assignment_id)
        assert assignment.state == AssignmentState.WAITING_FOR_RETURNING.value
        assert len(assignment.returning_requests) == 1


def test_returning_request_needs_accepted_assignment(client, app, build, admin_id, admin_headers):
    assignment_id = build.assignment(build.asset(), build.user(), admin_id,
                                     state=AssignmentState.WAITING_FOR_ACCEPTANCE)

    response = client.post(f'/api/returningRequest/{assignment_id}', headers=admin_headers)
    assert response.status_code == 400
    with app.app_context():
        assert ReturningRequest.query.count() == 0
        assert db.session.get(Assignment, assignment_id).state == AssignmentState.WAITING_FOR_ACCEPTANCE.value


def test_returning_request_unknown_assignment(client, admin_headers):
    response = client.post('/api/returningRequest/31337', headers=admin_headers)
    assert response.status_code == 404


def test_admin_of_other_location_cannot_request(client, build):
    hn_admin = build.user(admin=True, location='HN')
    hcm_admin = build.user(admin=True)
    assignment_id = build.assignment(build.asset(), build.user(), hcm_admin)

    response = client.post(f'/api/returningRequest/{assignment_id}', headers=build.headers(hn_admin))
    assert response.status_code == 404


def test_staff_requests_return_of_own_assignment(client, build, admin_id):
    holder = build.user(username='holder')
    assignment_id = build.assignment(build.asset(), holder, admin_id)

    response = client.post(f'/api/returningRequest/my/{assignment_id}', headers=build.headers(holder))
    assert response.status_code == 201
    assert response.get_json()['result']['requestedBy'] == 'holder'


def test_staff_cannot_request_return_of_others_assignment(client, build, admin_id):
    assignment_id = build.assignment(build.asset(), build.user(), admin_id)

    response = client.post(f'/api/returningRequest/my/{assignment_id}', headers=build.headers(build.user()))
    assert response.status_code == 404


def test_staff_cannot_use_admin_returning_endpoint(client, build, admin_id):
    holder = build.user()
    assignment_id = build.assignment(build.asset(), holder, admin_id)

    response = client.post(f'/api/returningRequest/{assignment_id}', headers=build.headers(holder))
    assert response.status_code == 403


def test_complete_returning_request(client, app, build, admin_id, admin_headers):
    asset_id = build.asset()
    holder = build.user()
    assignment_id = build.assignment(asset_id, holder, admin_id)
    request_id = build.returning_request(assignment_id, holder)

    response = client.put(f'/api/returningRequest/{request_id}/complete', headers=admin_headers)
    assert response.status_code == 200
    result = response.get_json()['result']
    assert result['state'] == 'Completed'
    assert result['acceptedBy'] == 'admin'
    assert result['returnedDate'] == date.today().isoformat()

    with app.app_context():
        assert db.session.get(Assignment, assignment_id).state == AssignmentState.RETURNED.value
        assert db.session.get(Asset, asset_id).state == AssetState.AVAILABLE.value

    # A completed request cannot be completed again
    response = client.put(f'/api/returningRequest/{request_id}/complete', headers=admin_headers)
    assert response.status_code == 400


def test_cancel_returning_request(client, app, build, admin_id, admin_headers):
    holder = build.user()
    assignment_id = build.assignment(build.asset(), holder, admin_id)
    request_id = build.returning_request(assignment_id, holder)

    response = client.delete(f'/api/returningRequest/{request_id}', headers=admin_headers)
    assert response.status_code == 200

    with app.app_context():
        assert db.session.get(ReturningRequest, request_id) is None
        assert db.session.get(Assignment, assignment_id).state == AssignmentState.ACCEPTED.value


def test_filter_returning_requests(client, app, build, admin_id, admin_headers):
    alice, bob = build.user(username='alice'), build.user(username='bob')
    first = build.returning_request(build.assignment(build.asset(name='Laptop'), alice, admin_id), alice)
    build.returning_request(build.assignment(build.asset(name='Mouse'), bob, admin_id), bob)
    build.returning_request(build.assignment(build.asset(name='Desk', location='HN'), bob, admin_id), bob)

    client.put(f'/api/returningRequest/{first}/complete', headers=admin_headers)

    response = client.get('/api/returningRequest/filter', headers=admin_headers)
    assert {row['assetName'] for row in response.get_json()['result']} == {'Laptop', 'Mouse'}

    response = client.get('/api/returningRequest/filter?states=Completed', headers=admin_headers)
    assert [row['requestedBy'] for row in response.get_json()['result']] == ['alice']

    response = client.get(f'/api/returningRequest/filter?returnedDate={date.today().isoformat()}',
                          headers=admin_headers)
    assert [row['assetName'] for row in response.get_json()['result']] == ['Laptop']

    response = client.get('/api/returningRequest/filter?search=bob&sortAssetName=Desc', headers=admin_headers)
    assert [row['assetName'] for row in response.get_json()['result']] == ['Mouse']

    with app.app_context():
        assert ReturningRequest.query.filter_by(state=ReturningRequestState.COMPLETED.value).count() == 1
