import logging
from typing import Any

from sqlalchemy import case
from sqlmodel import Session, or_, select

from app.domain.errors import NotFoundError, ValidationError
from app.domain.models import Category, Customer, Technician, Ticket, utcnow
from app.domain.schemas import TicketPriority
from app.services.common import commit, count, pagination, require_fields
from app.services.deletion_policy import TECHNICIAN_POLICY, DeletionOutcome, apply_deletion, check_blockers

logger = logging.getLogger("technician_service")

REQUIRED_MESSAGE = "First name, last name, and email are required"

PRIORITY_RANK = {
    TicketPriority.CRITICAL.value: 1,
    TicketPriority.HIGH.value: 2,
    TicketPriority.MEDIUM.value: 3,
    TicketPriority.LOW.value: 4,
}


def _email_taken(session: Session, email: str, exclude_id: int | None = None) -> bool:
    q = select(Technician.id).where(Technician.email == email)
    if exclude_id is not None:
        q = q.where(Technician.id != exclude_id)
    return session.exec(q).first() is not None


def list_technicians(
    session: Session,
    search: str | None = None,
    active_only: bool = True,
    page: int = 1,
    limit: int = 50,
) -> dict[str, Any]:
    q = select(Technician)
    if active_only:
        q = q.where(Technician.is_active == True)  # noqa: E712
    if search:
        pattern = f"%{search}%"
        q = q.where(or_(
            Technician.first_name.like(pattern),
            Technician.last_name.like(pattern),
            Technician.email.like(pattern),
        ))

    total = count(session, q)
    rows = session.exec(
        q.order_by(Technician.first_name, Technician.last_name, Technician.id).offset((page - 1) * limit).limit(limit)
    ).all()
    return {"technicians": rows, "pagination": pagination(page, limit, total)}


def get_technician(session: Session, technician_id: int) -> Technician:
    technician = session.get(Technician, technician_id)
    if not technician:
        raise NotFoundError("Technician not found")
    return technician


def get_technician_detail(session: Session, technician_id: int) -> dict[str, Any]:
    technician = get_technician(session, technician_id)

    rows = session.exec(
        select(
            Ticket.id,
            Ticket.ticket_number,
            Ticket.title,
            Ticket.status,
            Ticket.priority,
            Ticket.created_at,
            Ticket.updated_at,
            Customer.company_name,
            Customer.contact_name,
            Category.name.label("category_name"),
        )
        .outerjoin(Customer, Ticket.customer_id == Customer.id)
        .outerjoin(Category, Ticket.category_id == Category.id)
        .where(Ticket.technician_id == technician_id)
        # Most urgent first, then oldest first
        .order_by(case(PRIORITY_RANK, value=Ticket.priority, else_=5), Ticket.created_at, Ticket.id)
    ).all()

    return {**technician.model_dump(), "assigned_tickets": [dict(r._mapping) for r in rows]}


def create_technician(
    session: Session,
    first_name: str,
    last_name: str,
    email: str,
    phone: str | None = None,
) -> Technician:
    require_fields(REQUIRED_MESSAGE, first_name=first_name, last_name=last_name, email=email)
    if _email_taken(session, email):
        raise ValidationError("Technician with this email already exists")

    technician = Technician(first_name=first_name, last_name=last_name, email=email, phone=phone or None)
    session.add(technician)
    commit(session, technician, duplicate_message="Technician with this email already exists")
    logger.info("technician created id=%s", technician.id)
    return technician


def update_technician(
    session: Session,
    technician_id: int,
    first_name: str,
    last_name: str,
    email: str,
    phone: str | None = None,
    is_active: bool = True,
) -> Technician:
    require_fields(REQUIRED_MESSAGE, first_name=first_name, last_name=last_name, email=email)
    technician = get_technician(session, technician_id)
    if _email_taken(session, email, exclude_id=technician_id):
        raise ValidationError("Another technician with this email already exists")

    # Deactivating through PUT obeys the same rule as DELETE
    if technician.is_active and not is_active:
        check_blockers(session, TECHNICIAN_POLICY, technician_id)

    technician.first_name = first_name
    technician.last_name = last_name
    technician.email = email
    technician.phone = phone or None
    technician.is_active = is_active
    technician.updated_at = utcnow()

    session.add(technician)
    commit(session, technician, duplicate_message="Another technician with this email already exists")
    logger.info("technician updated id=%s is_active=%s", technician_id, is_active)
    return technician


def deactivate_technician(session: Session, technician_id: int) -> DeletionOutcome:
    return apply_deletion(session, TECHNICIAN_POLICY, technician_id)
