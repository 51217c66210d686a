"""Asset lookups, creation, updates and the asset list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from asset_admin.app import db
from asset_admin.app.errors import BadRequestError, NotFoundError
from asset_admin.app.logger import get_logger
from asset_admin.app.models import Asset, AssetState, Category
from asset_admin.app.services import query as q

logger = get_logger("asset_admin.services.assets")

ASSET_SORT_TABLE = [
    q.SortField("sortAssetCode", Asset.asset_code),
    q.SortField("sortAssetName", Asset.name),
    q.SortField("sortCategory", Category.name),
    q.SortField("sortState", q.enum_order(Asset.state, AssetState)),
    q.SortField("sortLastUpdate", Asset.last_updated),
]
ASSET_DEFAULT_ORDER = Asset.asset_code.asc()

# States an asset may be created in
CREATABLE_STATES = (AssetState.AVAILABLE, AssetState.NOT_AVAILABLE)


@dataclass
class AssetFilters(q.ListFilters):
    categories: list = field(default_factory=list)

    @classmethod
    def from_args(cls, args: Any) -> "AssetFilters":
        return cls(
            search=args.get("search"),
            states=q.match_enum_values(AssetState, q.parse_list(args, "states")),
            categories=[int(c) for c in q.parse_list(args, "categories") if c.isdigit()],
            sorts=q.parse_sorts(args, ASSET_SORT_TABLE),
            page=q.parse_page(args),
        )


def filter_assets(requester_id: Optional[int], filters: AssetFilters) -> q.Page:
    requester = q.resolve_requester(requester_id)

    clauses = [
        Asset.location == requester.location,
        q.search_clause(filters.search_term, [Asset.asset_code, Asset.name]),
        q.in_clause(Asset.state, filters.states),
        q.in_clause(Asset.category_id, filters.categories),
    ]
    order_by = q.resolve_order(filters.sorts, ASSET_SORT_TABLE, ASSET_DEFAULT_ORDER)
    return q.run_list_query(
        Asset.query.join(Category, Asset.category_id == Category.id),
        clauses, order_by, filters.page, asset_row,
    )


def asset_row(asset: Asset) -> dict:
    return {
        "id": asset.id,
        "assetCode": asset.asset_code,
        "name": asset.name,
        "category": asset.category.name,
        "state": asset.state,
        "lastUpdated": q.iso(asset.last_updated),
    }


def asset_details(asset: Asset) -> dict:
    data = asset_row(asset)
    data.update({
        "categoryId": asset.category_id,
        "specification": asset.specification,
        "installedDate": q.iso(asset.installed_date),
        "location": asset.location,
        "history": [
            {
                "assignmentId": a.id,
                "assignedDate": q.iso(a.assigned_date),
                "assignedTo": a.assigned_to.username,
                "assignedBy": a.assigned_by.username,
                "state": a.state,
                "returnedDate": next(
                    (q.iso(r.returned_date) for r in a.returning_requests if r.returned_date), None
                ),
            }
            for a in asset.assignments
        ],
    })
    return data


def _get_scoped_asset(requester, asset_id) -> Asset:
    asset = q.get_or_none(Asset, asset_id)
    # Assets in other locations look exactly like missing ones
    if asset is None or asset.location != requester.location:
        raise NotFoundError("Asset is not found!")
    return asset


def get_asset(requester_id: Optional[int], asset_id: Optional[int]) -> dict:
    requester = q.resolve_requester(requester_id)
    return asset_details(_get_scoped_asset(requester, asset_id))


def next_asset_code(category: Category) -> str:
    prefix = category.prefix.upper()
    codes = db.session.query(Asset.asset_code).filter(Asset.asset_code.like(f"{prefix}%")).all()
    numbers = [int(code[len(prefix):]) for (code,) in codes if code[len(prefix):].isdigit()]
    return f"{prefix}{(max(numbers, default=0) + 1):06d}"


def create_asset(requester_id: Optional[int], data: dict) -> dict:
    requester = q.resolve_requester(requester_id)

    category = q.get_or_none(Category, data.get("category_id"))
    if category is None:
        raise NotFoundError("Category is not found!")

    try:
        state = AssetState.parse(data.get("state") or AssetState.AVAILABLE)
    except ValueError as e:
        raise BadRequestError(str(e))
    if state not in CREATABLE_STATES:
        raise BadRequestError("A new asset must be Available or NotAvailable")

    asset = Asset(
        asset_code=next_asset_code(category),
        category_id=category.id,
        name=data["name"],
        location=requester.location,
        state=state,
        specification=data.get("specification"),
        installed_date=data.get("installed_date"),
    )
    db.session.add(asset)
    db.session.commit()
    logger.info("Asset %s created by %s", asset.asset_code, requester.username)
    return asset_details(asset)


def update_asset(requester_id: Optional[int], asset_id: Optional[int], data: dict) -> None:
    requester = q.resolve_requester(requester_id)
    asset = _get_scoped_asset(requester, asset_id)

    if asset.active_assignment is not None:
        raise BadRequestError("Asset is assigned and can not be updated")

    if data.get("name"):
        asset.name = data["name"].strip()
    if "specification" in data and data["specification"] is not None:
        asset.specification = data["specification"]
    if data.get("installed_date") is not None:
        asset.installed_date = data["installed_date"]
    if data.get("state"):
        try:
            asset.state = AssetState.parse(data["state"]).value
        except ValueError as e:
            raise BadRequestError(str(e))

    db.session.commit()
    logger.info("Asset %s updated by %s", asset.asset_code, requester.username)
