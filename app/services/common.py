import math
from enum import Enum
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, select

from app.domain.errors import ValidationError


def normalize(v):
    # Accepts Enum (schemas) or plain str
    return v.value if isinstance(v, Enum) else v


def require_fields(message: str = "Missing required fields", **fields: Any) -> None:
    missing = [k for k, v in fields.items() if v is None or (isinstance(v, str) and not v.strip())]
    if missing:
        raise ValidationError(message, missing=missing)


def commit(session: Session, obj: SQLModel | None = None, *, duplicate_message: str = "Duplicate value") -> None:
    """Commit, turning a unique-constraint race into a ValidationError."""
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ValidationError(duplicate_message) from e
    if obj is not None:
        session.refresh(obj)


def count(session: Session, query) -> int:
    return session.exec(select(func.count()).select_from(query.order_by(None).subquery())).one()


def pagination(page: int, limit: int, total: int) -> dict[str, int]:
    return {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit) if limit else 0}
