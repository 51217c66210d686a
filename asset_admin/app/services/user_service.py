"""
User Service

Handles:
- the user list (filter/sort/paginate, location scoped)
- account creation with generated username, staff code and first password
- profile updates and soft deletion (disable)
- login tokens and password changes
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from sqlalchemy import func, select

from asset_admin.app import db
from asset_admin.app.errors import BadRequestError, NotFoundError, UnauthorizedError, log_failures
from asset_admin.app.logger import get_logger
from asset_admin.app.models import Assignment, AssignmentState, Role, RoleName, User, UserRole
from asset_admin.app.services import query as q

logger = get_logger("asset_admin.services.users")

USER_NOT_FOUND = "User can not found"

FULL_NAME = User.first_name + " " + User.last_name

# Name of the user's first role, for sorting by type
USER_TYPE = (
    select(func.min(Role.name))
    .select_from(Role)
    .join(UserRole, UserRole.role_id == Role.id)
    .where(UserRole.user_id == User.id)
    .correlate(User)
    .scalar_subquery()
)

USER_SORT_TABLE = [
    q.SortField("sortStaffCode", User.staff_code),
    q.SortField("sortFullName", FULL_NAME),
    q.SortField("sortJoinedDate", User.joined_date),
    q.SortField("sortType", USER_TYPE),
    q.SortField("sortLastUpdate", User.last_updated),
]
USER_DEFAULT_ORDER = User.joined_date.desc()


@dataclass
class UserFilters(q.ListFilters):
    """``states`` holds role names for this list (the ``types`` query parameter)."""

    @classmethod
    def from_args(cls, args: Any) -> "UserFilters":
        return cls(
            search=args.get("search") or args.get("name"),
            states=q.match_enum_values(RoleName, q.parse_list(args, "types")),
            sorts=q.parse_sorts(args, USER_SORT_TABLE),
            page=q.parse_page(args),
        )


def user_row(user: User) -> dict:
    return {
        "id": user.id,
        "staffCode": user.staff_code,
        "fullName": user.full_name,
        "username": user.username,
        "joinedDate": q.iso(user.joined_date),
        "types": user.role_names,
    }


def user_details(user: User) -> dict:
    data = user_row(user)
    data.update({
        "firstName": user.first_name,
        "lastName": user.last_name,
        "dateOfBirth": q.iso(user.date_of_birth),
        "gender": user.gender,
        "location": user.location,
        "isDisabled": user.is_disabled,
        "isPasswordChanged": user.is_password_changed,
    })
    return data


@log_failures
def filter_users(requester_id: Optional[int], filters: UserFilters) -> q.Page:
    requester = q.resolve_requester(requester_id)

    clauses = [
        User.location == requester.location,
        User.is_disabled.is_(False),
        q.search_clause(filters.search_term, [FULL_NAME, User.staff_code, User.username]),
        User.user_roles.any(UserRole.role.has(Role.name.in_(filters.states))) if filters.states else None,
    ]
    order_by = q.resolve_order(filters.sorts, USER_SORT_TABLE, USER_DEFAULT_ORDER)
    return q.run_list_query(User.query, clauses, order_by, filters.page, user_row)


def _get_user(user_id) -> User:
    user = q.get_or_none(User, user_id)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    return user


def get_user(user_id: Optional[int]) -> dict:
    return user_details(_get_user(user_id))


def _get_role(name) -> Role:
    try:
        role_name = next(r for r in RoleName if r.value.lower() == str(name).strip().lower())
    except StopIteration:
        raise BadRequestError(f"Invalid type: {name}")
    role = Role.query.filter_by(name=role_name.value).first()
    if role is None:
        raise NotFoundError(f"Role {role_name.value} is not seeded")
    return role


def _check_dates(date_of_birth: Optional[date], joined_date: Optional[date]):
    if date_of_birth and joined_date and joined_date < date_of_birth:
        raise BadRequestError("Joined date is not later than Date of Birth. Please select a different date")


def _ascii_letters(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", value)
    return re.sub(r"[^a-z]", "", normalized.encode("ascii", "ignore").decode().lower())


def generate_username(first_name: str, last_name: str) -> str:
    """First name plus the initials of the last name, with a number appended on collision."""
    base = _ascii_letters(first_name) + "".join(_ascii_letters(part)[:1] for part in last_name.split())
    base = base or "user"
    taken = {
        name for (name,) in db.session.query(User.username).filter(User.username.like(f"{base}%")).all()
    }
    if base not in taken:
        return base
    suffix = 1
    while f"{base}{suffix}" in taken:
        suffix += 1
    return f"{base}{suffix}"


def generate_staff_code() -> str:
    codes = db.session.query(User.staff_code).filter(User.staff_code.like("SD%")).all()
    numbers = [int(code[2:]) for (code,) in codes if code[2:].isdigit()]
    return f"SD{(max(numbers, default=0) + 1):04d}"


def default_password(username: str, date_of_birth: Optional[date]) -> str:
    if date_of_birth is None:
        return f"{username}@123"
    return f"{username}@{date_of_birth:%d%m%Y}"


def create_user(requester_id: Optional[int], data: dict) -> dict:
    requester = q.resolve_requester(requester_id)

    first_name = (data.get("first_name") or "").strip()
    last_name = (data.get("last_name") or "").strip()
    if not first_name or not last_name:
        raise BadRequestError("First name and last name are required")
    _check_dates(data.get("date_of_birth"), data.get("joined_date"))
    role = _get_role(data.get("type") or RoleName.STAFF.value)

    username = generate_username(first_name, last_name)
    user = User(
        username=username,
        first_name=first_name,
        last_name=last_name,
        staff_code=generate_staff_code(),
        date_of_birth=data.get("date_of_birth"),
        gender=data.get("gender"),
        joined_date=data.get("joined_date"),
        location=requester.location,
        is_disabled=False,
        is_password_changed=False,
    )
    user.set_password(default_password(username, user.date_of_birth))
    user.set_roles([role])
    db.session.add(user)
    db.session.commit()
    logger.info("User %s (%s) created by %s", user.username, user.staff_code, requester.username)
    return user_details(user)


def update_user(user_id: Optional[int], data: dict) -> dict:
    user = _get_user(user_id)

    date_of_birth = data.get("date_of_birth") or user.date_of_birth
    joined_date = data.get("joined_date") or user.joined_date
    _check_dates(date_of_birth, joined_date)

    user.date_of_birth = date_of_birth
    user.joined_date = joined_date
    if data.get("gender"):
        user.gender = data["gender"]
    if data.get("type"):
        user.set_roles([_get_role(data["type"])])

    db.session.commit()
    logger.info("User %s updated", user.username)
    return user_details(user)


@log_failures
def disable_user(user_id: Optional[int]) -> dict:
    user = _get_user(user_id)
    if user.is_disabled:
        return {"id": user.id, "isDisabled": True}

    active = Assignment.query.filter(
        Assignment.assigned_to_id == user.id,
        Assignment.state.in_(AssignmentState.active_values()),
    ).count()
    if active:
        raise BadRequestError("There are valid assignments belonging to this user. "
                              "Please close all assignments before disabling user.")

    user.is_disabled = True
    db.session.commit()
    logger.info("User %s disabled", user.username)
    return {"id": user.id, "isDisabled": True}


def authenticate(username: str, password: str) -> dict:
    user = User.query.filter(func.lower(User.username) == (username or "").strip().lower()).first()
    if user is None or not user.check_password(password or ""):
        raise UnauthorizedError("Username or password is incorrect. Please try again")
    if user.is_disabled:
        raise UnauthorizedError("Your account is disabled. Please contact with IT Team")

    logger.info("User %s logged in", user.username)
    return {
        "token": user.get_auth_token(),
        "username": user.username,
        "types": user.role_names,
        "location": user.location,
        "isPasswordChanged": user.is_password_changed,
    }


def change_password(user_id: Optional[int], old_password: str, new_password: str) -> None:
    user = q.resolve_requester(user_id)
    if not user.check_password(old_password or ""):
        raise BadRequestError("Password is incorrect")
    if old_password == new_password:
        raise BadRequestError("New password must be different from the old password")

    user.set_password(new_password)
    user.is_password_changed = True
    db.session.commit()
    logger.info("User %s changed password", user.username)
