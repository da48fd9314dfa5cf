import logging
from typing import Any

from sqlmodel import Session, select

from app.domain.errors import NotFoundError, ValidationError
from app.domain.models import (
    Category, Customer, Technician, Ticket, TicketAttachment, TicketComment, utcnow,
)
from app.domain.schemas import TicketPriority, TicketStatus
from app.services.common import commit, normalize, require_fields

logger = logging.getLogger("ticket_service")

UPDATABLE_FIELDS = ("technician_id", "status", "priority", "resolution_notes", "category_id")
# An explicit null on these unassigns; on the other fields it is ignored
CLEARABLE_FIELDS = {"technician_id", "category_id"}


def technician_name(label: str = "assigned_technician"):
    return (Technician.first_name + " " + Technician.last_name).label(label)


def ticket_number_for(ticket: Ticket) -> str:
    return f"TKT-{ticket.created_at:%Y}-{ticket.id:06d}"


def _check_enum(enum_cls, value: str, field: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}'. Allowed: {allowed}")


def _check_reference(session: Session, model, ref_id: int | None, label: str, *, active_only: bool = False) -> None:
    if ref_id is None:
        return
    row = session.get(model, ref_id)
    if not row:
        raise ValidationError(f"{label} {ref_id} does not exist")
    if active_only and not row.is_active:
        raise ValidationError(f"{label} {ref_id} is inactive")


def _ticket_rows():
    return (
        select(
            Ticket,
            Customer.company_name,
            Customer.contact_name,
            Customer.email.label("customer_email"),
            technician_name(),
            Category.name.label("category_name"),
        )
        .outerjoin(Customer, Ticket.customer_id == Customer.id)
        .outerjoin(Technician, Ticket.technician_id == Technician.id)
        .outerjoin(Category, Ticket.category_id == Category.id)
    )


def _row_to_dict(row) -> dict[str, Any]:
    ticket, *_ = row
    data = ticket.model_dump()
    data.update({k: v for k, v in row._mapping.items() if k != "Ticket"})
    return data


def create_ticket(
    session: Session,
    customer_id: int | None,
    title: str | None,
    description: str | None,
    priority: TicketPriority | str | None = None,
    category_id: int | None = None,
) -> Ticket:
    require_fields(customer_id=customer_id, title=title, description=description)
    priority = _check_enum(TicketPriority, normalize(priority) or TicketPriority.MEDIUM.value, "priority")
    _check_reference(session, Customer, customer_id, "Customer")
    _check_reference(session, Category, category_id, "Category")

    ticket = Ticket(
        customer_id=customer_id,
        title=title.strip(),
        description=description,
        priority=priority,
        status=TicketStatus.NEW.value,
        category_id=category_id,
    )
    session.add(ticket)
    # The primary key is handed out by the database inside this transaction
    session.flush()
    ticket.ticket_number = ticket_number_for(ticket)
    commit(session, ticket, duplicate_message="Ticket number already in use, retry the request")

    logger.info("ticket created id=%s number=%s customer_id=%s", ticket.id, ticket.ticket_number, customer_id)
    return ticket


def list_tickets(
    session: Session,
    status: TicketStatus | str | None = None,
    priority: TicketPriority | str | None = None,
    customer_id: int | None = None,
    technician_id: int | None = None,
    page: int = 1,
    limit: int = 20,
) -> list[dict[str, Any]]:
    q = _ticket_rows()
    if status is not None:
        q = q.where(Ticket.status == normalize(status))
    if priority is not None:
        q = q.where(Ticket.priority == normalize(priority))
    if customer_id is not None:
        q = q.where(Ticket.customer_id == customer_id)
    if technician_id is not None:
        q = q.where(Ticket.technician_id == technician_id)

    q = q.order_by(Ticket.created_at.desc(), Ticket.id.desc()).offset((page - 1) * limit).limit(limit)
    return [_row_to_dict(r) for r in session.exec(q).all()]


def get_ticket_detail(session: Session, ticket_id: int) -> dict[str, Any]:
    row = session.exec(
        _ticket_rows().add_columns(Customer.phone.label("customer_phone")).where(Ticket.id == ticket_id)
    ).first()
    if not row:
        raise NotFoundError("Ticket not found")

    ticket = _row_to_dict(row)
    ticket["comments"] = list_comments(session, ticket_id)
    ticket["attachments"] = [
        a.model_dump()
        for a in session.exec(
            select(TicketAttachment)
            .where(TicketAttachment.ticket_id == ticket_id)
            .order_by(TicketAttachment.created_at, TicketAttachment.id)
        ).all()
    ]
    return ticket


def update_ticket(session: Session, ticket_id: int, **fields) -> Ticket:
    ticket = session.get(Ticket, ticket_id)
    if not ticket:
        raise NotFoundError("Ticket not found")

    changes = {
        k: normalize(v)
        for k, v in fields.items()
        if k in UPDATABLE_FIELDS and (v is not None or k in CLEARABLE_FIELDS)
    }
    if not changes:
        raise ValidationError("No fields to update")

    if "status" in changes:
        changes["status"] = _check_enum(TicketStatus, changes["status"], "status")
    if "priority" in changes:
        changes["priority"] = _check_enum(TicketPriority, changes["priority"], "priority")
    if "technician_id" in changes:
        _check_reference(session, Technician, changes["technician_id"], "Technician", active_only=True)
    if "category_id" in changes:
        _check_reference(session, Category, changes["category_id"], "Category")

    for k, v in changes.items():
        setattr(ticket, k, v)

    now = utcnow()
    if changes.get("status") == TicketStatus.RESOLVED.value:
        ticket.resolved_at = now
    elif changes.get("status") == TicketStatus.CLOSED.value:
        ticket.closed_at = now
    ticket.updated_at = now

    session.add(ticket)
    commit(session, ticket)
    logger.info("ticket updated id=%s fields=%s", ticket_id, sorted(changes))
    return ticket


def add_comment(
    session: Session,
    ticket_id: int,
    technician_id: int | None,
    comment_text: str | None,
    is_internal: bool = True,
) -> TicketComment:
    require_fields(technician_id=technician_id, comment_text=comment_text)
    if not session.get(Ticket, ticket_id):
        raise NotFoundError("Ticket not found")
    _check_reference(session, Technician, technician_id, "Technician")

    comment = TicketComment(
        ticket_id=ticket_id,
        technician_id=technician_id,
        comment_text=comment_text,
        is_internal=is_internal,
    )
    session.add(comment)
    commit(session, comment)
    logger.info("comment added ticket_id=%s technician_id=%s", ticket_id, technician_id)
    return comment


def list_comments(session: Session, ticket_id: int) -> list[dict[str, Any]]:
    rows = session.exec(
        select(TicketComment, technician_name("technician_name"))
        .outerjoin(Technician, TicketComment.technician_id == Technician.id)
        .where(TicketComment.ticket_id == ticket_id)
        .order_by(TicketComment.created_at, TicketComment.id)
    ).all()
    return [{**c.model_dump(), "technician_name": name} for c, name in rows]
