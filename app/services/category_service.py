import logging
from typing import Any

from sqlmodel import Session, select

from app.domain.errors import NotFoundError, ValidationError
from app.domain.models import Category
from app.services.common import commit, require_fields
from app.services.deletion_policy import CATEGORY_POLICY, DeletionOutcome, apply_deletion
from app.services.workload_service import category_ticket_stats

logger = logging.getLogger("category_service")


def _name_taken(session: Session, name: str, exclude_id: int | None = None) -> bool:
    q = select(Category.id).where(Category.name == name)
    if exclude_id is not None:
        q = q.where(Category.id != exclude_id)
    return session.exec(q).first() is not None


def create_category(session: Session, name: str, description: str | None = None) -> Category:
    require_fields("Category name is required", name=name)
    if _name_taken(session, name):
        raise ValidationError("Category with this name already exists")

    category = Category(name=name, description=description or None)
    session.add(category)
    commit(session, category, duplicate_message="Category with this name already exists")
    logger.info("category created id=%s name=%s", category.id, name)
    return category


def list_categories(session: Session, active_only: bool = True) -> list[Category]:
    q = select(Category)
    if active_only:
        q = q.where(Category.is_active == True)  # noqa: E712
    return session.exec(q.order_by(Category.name)).all()


def get_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


def get_category_detail(session: Session, category_id: int) -> dict[str, Any]:
    category = get_category(session, category_id)
    return {**category.model_dump(), "ticket_stats": category_ticket_stats(session, category_id)}


def update_category(
    session: Session,
    category_id: int,
    name: str,
    description: str | None = None,
    is_active: bool = True,
) -> Category:
    require_fields("Category name is required", name=name)
    category = get_category(session, category_id)
    if _name_taken(session, name, exclude_id=category_id):
        raise ValidationError("Another category with this name already exists")

    category.name = name
    category.description = description or None
    category.is_active = is_active

    session.add(category)
    commit(session, category, duplicate_message="Another category with this name already exists")
    logger.info("category updated id=%s", category_id)
    return category


def delete_category(session: Session, category_id: int) -> DeletionOutcome:
    return apply_deletion(session, CATEGORY_POLICY, category_id)
