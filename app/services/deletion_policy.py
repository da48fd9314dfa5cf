"""
Delete-with-dependency-check, shared by customers, technicians and categories.

A policy answers two questions about a row, both by counting tickets:
- does anything *block* the removal? -> ConflictError
- is the row still *referenced*?     -> soft delete (is_active = False)
Otherwise the row is hard deleted. ``soft_only`` entities are never hard deleted.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import and_, func
from sqlmodel import Session, SQLModel, select

from app.domain.errors import ConflictError, NotFoundError
from app.domain.models import Category, Customer, Technician, Ticket, utcnow
from app.domain.schemas import ACTIVE_STATUSES

logger = logging.getLogger("deletion_policy")

TicketFilter = Callable[[int], Any]


@dataclass(frozen=True)
class DeletionPolicy:
    model: type[SQLModel]
    label: str
    blocking: TicketFilter | None = None
    blocking_message: str = ""
    blocking_count_key: str | None = None
    referencing: TicketFilter | None = None
    soft_only: bool = False


@dataclass
class DeletionOutcome:
    action: str  # "deleted" | "deactivated"
    message: str
    record: dict[str, Any]


def _ticket_count(session: Session, condition) -> int:
    return session.exec(select(func.count(Ticket.id)).where(condition)).one()


def check_blockers(session: Session, policy: DeletionPolicy, entity_id: int) -> None:
    if policy.blocking is None:
        return
    blocked = _ticket_count(session, policy.blocking(entity_id))
    if blocked:
        extra = {policy.blocking_count_key: blocked} if policy.blocking_count_key else {}
        logger.warning("%s %s removal blocked by %s ticket(s)", policy.label, entity_id, blocked)
        raise ConflictError(policy.blocking_message, **extra)


def apply_deletion(session: Session, policy: DeletionPolicy, entity_id: int) -> DeletionOutcome:
    row = session.get(policy.model, entity_id)
    if not row:
        raise NotFoundError(f"{policy.label} not found")

    check_blockers(session, policy, entity_id)

    referenced = policy.referencing is not None and _ticket_count(session, policy.referencing(entity_id)) > 0

    if policy.soft_only or referenced:
        row.is_active = False
        if hasattr(row, "updated_at"):
            row.updated_at = utcnow()
        session.add(row)
        session.commit()
        session.refresh(row)
        message = f"{policy.label} deactivated successfully"
        if referenced:
            message += " (cannot delete due to existing tickets)"
        logger.info("%s %s deactivated", policy.label, entity_id)
        return DeletionOutcome("deactivated", message, row.model_dump())

    record = row.model_dump()
    session.delete(row)
    session.commit()
    logger.info("%s %s deleted", policy.label, entity_id)
    return DeletionOutcome("deleted", f"{policy.label} deleted successfully", record)


CUSTOMER_POLICY = DeletionPolicy(
    model=Customer,
    label="Customer",
    blocking=lambda cid: Ticket.customer_id == cid,
    blocking_message="Cannot delete customer with existing tickets. Please resolve or reassign tickets first.",
)

TECHNICIAN_POLICY = DeletionPolicy(
    model=Technician,
    label="Technician",
    blocking=lambda tid: and_(Ticket.technician_id == tid, Ticket.status.in_(ACTIVE_STATUSES)),
    blocking_message="Cannot deactivate technician with active tickets. Please reassign tickets first.",
    blocking_count_key="active_tickets",
    soft_only=True,
)

CATEGORY_POLICY = DeletionPolicy(
    model=Category,
    label="Category",
    referencing=lambda cid: Ticket.category_id == cid,
)
