import logging
from typing import Any

from sqlmodel import Session, or_, select

from app.domain.errors import NotFoundError, ValidationError
from app.domain.models import Category, Customer, Technician, Ticket, utcnow
from app.services.common import commit, count, pagination, require_fields
from app.services.deletion_policy import CUSTOMER_POLICY, DeletionOutcome, apply_deletion
from app.services.ticket_service import technician_name

logger = logging.getLogger("customer_service")

REQUIRED_MESSAGE = "Company name, contact name, and email are required"


def _email_taken(session: Session, email: str, exclude_id: int | None = None) -> bool:
    q = select(Customer.id).where(Customer.email == email)
    if exclude_id is not None:
        q = q.where(Customer.id != exclude_id)
    return session.exec(q).first() is not None


def list_customers(session: Session, search: str | None = None, page: int = 1, limit: int = 20) -> dict[str, Any]:
    q = select(Customer)
    if search:
        pattern = f"%{search}%"
        q = q.where(or_(
            Customer.company_name.like(pattern),
            Customer.contact_name.like(pattern),
            Customer.email.like(pattern),
        ))

    total = count(session, q)
    rows = session.exec(q.order_by(Customer.company_name, Customer.id).offset((page - 1) * limit).limit(limit)).all()
    return {"customers": rows, "pagination": pagination(page, limit, total)}


def get_customer(session: Session, customer_id: int) -> Customer:
    customer = session.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def get_customer_detail(session: Session, customer_id: int) -> dict[str, Any]:
    customer = get_customer(session, customer_id)

    rows = session.exec(
        select(
            Ticket.id,
            Ticket.ticket_number,
            Ticket.title,
            Ticket.status,
            Ticket.priority,
            Ticket.created_at,
            Ticket.updated_at,
            technician_name(),
            Category.name.label("category_name"),
        )
        .outerjoin(Technician, Ticket.technician_id == Technician.id)
        .outerjoin(Category, Ticket.category_id == Category.id)
        .where(Ticket.customer_id == customer_id)
        .order_by(Ticket.created_at.desc(), Ticket.id.desc())
    ).all()

    return {**customer.model_dump(), "tickets": [dict(r._mapping) for r in rows]}


def create_customer(
    session: Session,
    company_name: str,
    contact_name: str,
    email: str,
    phone: str | None = None,
    address: str | None = None,
) -> Customer:
    require_fields(REQUIRED_MESSAGE, company_name=company_name, contact_name=contact_name, email=email)
    if _email_taken(session, email):
        raise ValidationError("Customer with this email already exists")

    customer = Customer(
        company_name=company_name,
        contact_name=contact_name,
        email=email,
        phone=phone or None,
        address=address or None,
    )
    session.add(customer)
    commit(session, customer, duplicate_message="Customer with this email already exists")
    logger.info("customer created id=%s", customer.id)
    return customer


def update_customer(
    session: Session,
    customer_id: int,
    company_name: str,
    contact_name: str,
    email: str,
    phone: str | None = None,
    address: str | None = None,
) -> Customer:
    require_fields(REQUIRED_MESSAGE, company_name=company_name, contact_name=contact_name, email=email)
    customer = get_customer(session, customer_id)
    if _email_taken(session, email, exclude_id=customer_id):
        raise ValidationError("Another customer with this email already exists")

    customer.company_name = company_name
    customer.contact_name = contact_name
    customer.email = email
    customer.phone = phone or None
    customer.address = address or None
    customer.updated_at = utcnow()

    session.add(customer)
    commit(session, customer, duplicate_message="Another customer with this email already exists")
    logger.info("customer updated id=%s", customer_id)
    return customer


def delete_customer(session: Session, customer_id: int) -> DeletionOutcome:
    return apply_deletion(session, CUSTOMER_POLICY, customer_id)
