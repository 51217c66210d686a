"""Assignments: checking an asset out to a user.

The asset is flipped from Available to NotAvailable with a conditional
UPDATE in the same commit as the new assignment, so two concurrent
requests for one asset cannot both succeed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from sqlalchemy.orm import aliased

from asset_admin.app import db
from asset_admin.app.errors import BadRequestError, NotFoundError
from asset_admin.app.logger import get_logger
from asset_admin.app.models import Asset, AssetState, Assignment, AssignmentState, Category, User
from asset_admin.app.services import query as q

logger = get_logger("asset_admin.services.assignments")

AssignedTo = aliased(User, name="assigned_to_user")
AssignedBy = aliased(User, name="assigned_by_user")

ASSIGNMENT_SORT_TABLE = [
    q.SortField("sortAssetCode", Asset.asset_code),
    q.SortField("sortAssetName", Asset.name),
    q.SortField("sortAssignedTo", AssignedTo.username),
    q.SortField("sortAssignedBy", AssignedBy.username),
    q.SortField("sortAssignedDate", Assignment.assigned_date),
    q.SortField("sortState", q.enum_order(Assignment.state, AssignmentState)),
    q.SortField("sortLastUpdate", Assignment.last_updated),
]
ASSIGNMENT_DEFAULT_ORDER = Assignment.assigned_date.desc()

MY_ASSIGNMENT_SORT_TABLE = [
    q.SortField("sortAssetCode", Asset.asset_code),
    q.SortField("sortAssetName", Asset.name),
    q.SortField("sortCategory", Category.name),
    q.SortField("sortAssignedDate", Assignment.assigned_date),
    q.SortField("sortState", q.enum_order(Assignment.state, AssignmentState)),
]


@dataclass
class AssignmentFilters(q.ListFilters):
    assigned_date: Optional[date] = None

    @classmethod
    def from_args(cls, args: Any) -> "AssignmentFilters":
        return cls(
            search=args.get("search"),
            states=q.match_enum_values(AssignmentState, q.parse_list(args, "states")),
            assigned_date=q.parse_date(args, "assignedDate"),
            sorts=q.parse_sorts(args, ASSIGNMENT_SORT_TABLE),
            page=q.parse_page(args),
        )


@dataclass
class MyAssignmentFilters(q.ListFilters):

    @classmethod
    def from_args(cls, args: Any) -> "MyAssignmentFilters":
        return cls(sorts=q.parse_sorts(args, MY_ASSIGNMENT_SORT_TABLE), page=q.parse_page(args))


def assignment_row(assignment: Assignment) -> dict:
    return {
        "id": assignment.id,
        "assetCode": assignment.asset.asset_code,
        "assetName": assignment.asset.name,
        "assignedBy": assignment.assigned_by.username,
        "assignedTo": assignment.assigned_to.username,
        "assignedDate": q.iso(assignment.assigned_date),
        "state": assignment.state,
    }


def my_assignment_row(assignment: Assignment) -> dict:
    data = assignment_row(assignment)
    data.update({
        "category": assignment.asset.category.name,
        "specification": assignment.asset.specification,
        "note": assignment.note,
    })
    return data


def filter_assignments(requester_id: Optional[int], filters: AssignmentFilters) -> q.Page:
    requester = q.resolve_requester(requester_id)

    clauses = [
        Asset.location == requester.location,
        q.search_clause(filters.search_term, [Asset.name, Asset.asset_code, AssignedTo.username]),
        q.in_clause(Assignment.state, filters.states),
        q.same_day_clause(Assignment.assigned_date, filters.assigned_date),
    ]
    order_by = q.resolve_order(filters.sorts, ASSIGNMENT_SORT_TABLE, ASSIGNMENT_DEFAULT_ORDER)
    query = (
        Assignment.query
        .join(Asset, Assignment.asset_id == Asset.id)
        .join(AssignedTo, Assignment.assigned_to_id == AssignedTo.id)
        .join(AssignedBy, Assignment.assigned_by_id == AssignedBy.id)
    )
    return q.run_list_query(query, clauses, order_by, filters.page, assignment_row)


def my_assignments(requester_id: Optional[int], filters: MyAssignmentFilters) -> q.Page:
    """Assignments the requester currently holds, assigned today or earlier."""
    requester = q.resolve_requester(requester_id)

    # assigned_date is stored in UTC
    tomorrow = datetime.combine(datetime.utcnow().date(), time.min) + timedelta(days=1)
    clauses = [
        Assignment.assigned_to_id == requester.id,
        q.in_clause(Assignment.state, AssignmentState.active_values()),
        Assignment.assigned_date < tomorrow,
    ]
    order_by = q.resolve_order(filters.sorts, MY_ASSIGNMENT_SORT_TABLE, ASSIGNMENT_DEFAULT_ORDER)
    query = (
        Assignment.query
        .join(Asset, Assignment.asset_id == Asset.id)
        .join(Category, Asset.category_id == Category.id)
    )
    return q.run_list_query(query, clauses, order_by, filters.page, my_assignment_row)


def _get_user_to_assign(user_id) -> User:
    user = q.get_or_none(User, user_id)
    if user is None:
        raise NotFoundError("User to assigned is not found!")
    elif user.is_disabled:
        raise BadRequestError("User to assigned is disabled!")
    return user


def _get_asset_to_assign(asset_id) -> Asset:
    asset = q.get_or_none(Asset, asset_id)
    if asset is None:
        raise NotFoundError("Asset to assigned is not found!")
    elif asset.state != AssetState.AVAILABLE.value:
        raise BadRequestError("Asset is not available to assigned!")
    return asset


def create_assignment(requester_id: Optional[int], data: dict) -> dict:
    requester = q.resolve_requester(requester_id)
    assignee = _get_user_to_assign(data.get("user_id"))
    asset = _get_asset_to_assign(data.get("asset_id"))

    assigned_date = data.get("assigned_date")
    if isinstance(assigned_date, date) and not isinstance(assigned_date, datetime):
        assigned_date = datetime.combine(assigned_date, time.min)

    # Compare-and-set on the asset state; 0 rows means someone else got it first
    flipped = (
        Asset.query
        .filter(Asset.id == asset.id, Asset.state == AssetState.AVAILABLE.value)
        .update({Asset.state: AssetState.NOT_AVAILABLE.value, Asset.last_updated: datetime.utcnow()},
                synchronize_session="fetch")
    )
    if flipped != 1:
        db.session.rollback()
        raise BadRequestError("Asset is not available to assigned!")

    assignment = Assignment(
        asset_id=asset.id,
        assigned_by_id=requester.id,
        assigned_to_id=assignee.id,
        note=data.get("note"),
        assigned_date=assigned_date or datetime.utcnow(),
        state=AssignmentState.WAITING_FOR_ACCEPTANCE.value,
    )
    db.session.add(assignment)
    db.session.commit()
    logger.info("Asset %s assigned to %s by %s", asset.asset_code, assignee.username, requester.username)
    return assignment_row(assignment)


def respond_to_assignment(requester_id: Optional[int], assignment_id: Optional[int], accepted: bool) -> dict:
    requester = q.resolve_requester(requester_id)
    assignment = q.get_or_none(Assignment, assignment_id)
    if assignment is None or assignment.assigned_to_id != requester.id:
        raise NotFoundError("Can't find assignment")
    if assignment.state != AssignmentState.WAITING_FOR_ACCEPTANCE.value:
        raise BadRequestError("Only an assignment waiting for acceptance can be answered")

    if accepted:
        assignment.state = AssignmentState.ACCEPTED.value
    else:
        assignment.state = AssignmentState.DECLINED.value
        assignment.asset.state = AssetState.AVAILABLE.value

    db.session.commit()
    logger.info("Assignment %s %s by %s", assignment.id, assignment.state, requester.username)
    return assignment_row(assignment)
