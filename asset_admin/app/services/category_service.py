"""Categories own assets and give them their code prefix."""

from __future__ import annotations

from sqlalchemy import func

from asset_admin.app import db
from asset_admin.app.errors import BadRequestError
from asset_admin.app.logger import get_logger
from asset_admin.app.models import Category

logger = get_logger("asset_admin.services.categories")


def category_row(category: Category) -> dict:
    return {"id": category.id, "name": category.name, "prefix": category.prefix}


def list_categories() -> list[dict]:
    return [category_row(c) for c in Category.query.order_by(Category.name).all()]


def create_category(name: str, prefix: str) -> dict:
    name = (name or "").strip()
    prefix = (prefix or "").strip().upper()
    if not name:
        raise BadRequestError("Category name is required")
    if len(prefix) != 2 or not prefix.isalpha():
        raise BadRequestError("Prefix must be two letters")

    if Category.query.filter(func.lower(Category.name) == name.lower()).first():
        raise BadRequestError("Category is already existed. Please enter a different category")
    if Category.query.filter(Category.prefix == prefix).first():
        raise BadRequestError("Prefix is already existed. Please enter a different prefix")

    category = Category(name=name, prefix=prefix)
    db.session.add(category)
    db.session.commit()
    logger.info("Category %s (%s) created", name, prefix)
    return category_row(category)
