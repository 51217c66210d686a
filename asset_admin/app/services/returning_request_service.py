"""Returning requests gate the return of an accepted assignment."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from sqlalchemy.orm import aliased

from asset_admin.app import db
from asset_admin.app.errors import BadRequestError, NotFoundError
from asset_admin.app.logger import get_logger
from asset_admin.app.models import (Asset, AssetState, Assignment, AssignmentState, ReturningRequest,
                                    ReturningRequestState, User)
from asset_admin.app.services import query as q

logger = get_logger("asset_admin.services.returning_requests")

RequestedBy = aliased(User, name="requested_by_user")
AcceptedBy = aliased(User, name="accepted_by_user")

RETURNING_REQUEST_SORT_TABLE = [
    q.SortField("sortAssetCode", Asset.asset_code),
    q.SortField("sortAssetName", Asset.name),
    q.SortField("sortRequestedBy", RequestedBy.username),
    q.SortField("sortAssignedDate", Assignment.assigned_date),
    q.SortField("sortAcceptedBy", AcceptedBy.username),
    q.SortField("sortReturnedDate", ReturningRequest.returned_date),
    q.SortField("sortState", q.enum_order(ReturningRequest.state, ReturningRequestState)),
    q.SortField("sortLastUpdate", ReturningRequest.last_updated),
]
RETURNING_REQUEST_DEFAULT_ORDER = ReturningRequest.last_updated.desc()


@dataclass
class ReturningRequestFilters(q.ListFilters):
    returned_date: Optional[date] = None

    @classmethod
    def from_args(cls, args: Any) -> "ReturningRequestFilters":
        return cls(
            search=args.get("search"),
            states=q.match_enum_values(ReturningRequestState, q.parse_list(args, "states")),
            returned_date=q.parse_date(args, "returnedDate"),
            sorts=q.parse_sorts(args, RETURNING_REQUEST_SORT_TABLE),
            page=q.parse_page(args),
        )


def returning_request_row(request: ReturningRequest) -> dict:
    assignment = request.assignment
    return {
        "id": request.id,
        "assignmentId": assignment.id,
        "assetCode": assignment.asset.asset_code,
        "assetName": assignment.asset.name,
        "requestedBy": request.requested_by.username,
        "assignedDate": q.iso(assignment.assigned_date),
        "acceptedBy": request.accepted_by.username if request.accepted_by else None,
        "returnedDate": q.iso(request.returned_date),
        "state": request.state,
    }


def filter_returning_requests(requester_id: Optional[int], filters: ReturningRequestFilters) -> q.Page:
    requester = q.resolve_requester(requester_id)

    clauses = [
        Asset.location == requester.location,
        q.search_clause(filters.search_term, [Asset.asset_code, Asset.name, RequestedBy.username]),
        q.in_clause(ReturningRequest.state, filters.states),
        ReturningRequest.returned_date == filters.returned_date if filters.returned_date else None,
    ]
    order_by = q.resolve_order(filters.sorts, RETURNING_REQUEST_SORT_TABLE, RETURNING_REQUEST_DEFAULT_ORDER)
    query = (
        ReturningRequest.query
        .join(Assignment, ReturningRequest.assignment_id == Assignment.id)
        .join(Asset, Assignment.asset_id == Asset.id)
        .join(RequestedBy, ReturningRequest.requested_by_id == RequestedBy.id)
        .outerjoin(AcceptedBy, ReturningRequest.accepted_by_id == AcceptedBy.id)
    )
    return q.run_list_query(query, clauses, order_by, filters.page, returning_request_row)


def _get_assignment(assignment_id) -> Assignment:
    assignment = q.get_or_none(Assignment, assignment_id)
    if assignment is None:
        raise NotFoundError("Can't find assignment")
    return assignment


def _get_logged_in_user(requester_id) -> User:
    user = q.get_or_none(User, requester_id)
    if user is None:
        raise NotFoundError("User is not found!")
    elif user.is_disabled:
        raise BadRequestError("Your account is disabled!")
    return user


def _open_request(assignment: Assignment, user: User) -> dict:
    if assignment.state != AssignmentState.ACCEPTED.value:
        raise BadRequestError("Can't create request with assignment's state is not Accepted")

    assignment.state = AssignmentState.WAITING_FOR_RETURNING.value
    request = ReturningRequest(
        assignment_id=assignment.id,
        requested_by_id=user.id,
        state=ReturningRequestState.WAITING_FOR_RETURNING.value,
    )
    db.session.add(request)
    db.session.commit()
    logger.info("Returning request %s opened for assignment %s by %s", request.id, assignment.id, user.username)
    return returning_request_row(request)


def create_request_by_admin(requester_id: Optional[int], assignment_id: Optional[int]) -> dict:
    assignment = _get_assignment(assignment_id)
    user = _get_logged_in_user(requester_id)

    # The assignment must belong to the admin's location
    if assignment.assigned_by.location != user.location:
        raise NotFoundError("Location of this assignment is different from location of current user")

    return _open_request(assignment, user)


def create_request_by_account(requester_id: Optional[int], assignment_id: Optional[int]) -> dict:
    assignment = _get_assignment(assignment_id)
    user = _get_logged_in_user(requester_id)

    if assignment.assigned_to_id != user.id:
        raise NotFoundError("Can't find assignment")

    return _open_request(assignment, user)


def _get_waiting_request(requester, request_id) -> ReturningRequest:
    request = q.get_or_none(ReturningRequest, request_id)
    if request is None or request.assignment.asset.location != requester.location:
        raise NotFoundError("Can't find returning request")
    if request.state != ReturningRequestState.WAITING_FOR_RETURNING.value:
        raise BadRequestError("Returning request is already completed")
    return request


def complete_request(requester_id: Optional[int], request_id: Optional[int]) -> dict:
    requester = q.resolve_requester(requester_id)
    request = _get_waiting_request(requester, request_id)

    request.state = ReturningRequestState.COMPLETED.value
    request.returned_date = date.today()
    request.accepted_by_id = requester.id
    request.assignment.state = AssignmentState.RETURNED.value
    request.assignment.asset.state = AssetState.AVAILABLE.value

    db.session.commit()
    logger.info("Returning request %s completed by %s", request.id, requester.username)
    return returning_request_row(request)


def cancel_request(requester_id: Optional[int], request_id: Optional[int]) -> None:
    requester = q.resolve_requester(requester_id)
    request = _get_waiting_request(requester, request_id)

    request.assignment.state = AssignmentState.ACCEPTED.value
    db.session.delete(request)
    db.session.commit()
    logger.info("Returning request %s cancelled by %s", request_id, requester.username)
