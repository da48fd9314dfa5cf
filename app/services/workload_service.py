"""
Read-only ticket aggregates, recomputed by the database on every call.

Average resolution time is the mean of (resolved_at - created_at) in hours over
resolved tickets only. With no resolved ticket the database AVG is NULL and the
value is reported as None, never 0.
"""
from typing import Any

from sqlalchemy import case, func, literal_column
from sqlmodel import Session, select

from app.domain.errors import InfrastructureError
from app.domain.models import Category, Technician, Ticket
from app.domain.schemas import TERMINAL_STATUSES, TicketPriority, TicketStatus
from app.services.ticket_service import technician_name


def resolution_hours(dialect: str):
    """(resolved_at - created_at) in fractional hours for the given dialect name."""
    created, resolved = Ticket.created_at, Ticket.resolved_at

    if dialect == "sqlite":
        return (func.julianday(resolved) - func.julianday(created)) * 24.0
    if dialect == "postgresql":
        return func.extract("epoch", resolved - created) / 3600.0
    if dialect == "mssql":
        return func.datediff(literal_column("second"), created, resolved) / 3600.0
    if dialect in ("mysql", "mariadb"):
        return func.timestampdiff(literal_column("SECOND"), created, resolved) / 3600.0

    raise InfrastructureError(f"Unsupported database dialect for aggregates: {dialect}")


def _count_where(condition, label: str):
    return func.count(case((condition, 1))).label(label)


def _avg_resolution(session: Session):
    hours = resolution_hours(session.get_bind().dialect.name)
    return func.avg(case((Ticket.resolved_at.is_not(None), hours))).label("avg_resolution_time_hours")


def _status_breakdown():
    return [
        _count_where(Ticket.status == TicketStatus.NEW.value, "new_tickets"),
        _count_where(Ticket.status == TicketStatus.IN_PROGRESS.value, "in_progress_tickets"),
        _count_where(Ticket.status == TicketStatus.WAITING_FOR_CUSTOMER.value, "waiting_tickets"),
        _count_where(Ticket.status == TicketStatus.RESOLVED.value, "resolved_tickets"),
        _count_where(Ticket.status == TicketStatus.CLOSED.value, "closed_tickets"),
    ]


def _active():
    return _count_where(Ticket.status.not_in(TERMINAL_STATUSES), "active_tickets")


def _critical():
    return _count_where(Ticket.priority == TicketPriority.CRITICAL.value, "critical_tickets")


def _high():
    return _count_where(Ticket.priority == TicketPriority.HIGH.value, "high_priority_tickets")


def _shape(row) -> dict[str, Any]:
    data = dict(row._mapping)
    avg = data.get("avg_resolution_time_hours")
    data["avg_resolution_time_hours"] = round(float(avg), 2) if avg is not None else None
    return data


def technician_workload_summary(session: Session) -> list[dict[str, Any]]:
    active, critical, high = _active(), _critical(), _high()
    q = (
        select(
            Technician.id.label("technician_id"),
            technician_name("technician_name"),
            Technician.email,
            Technician.is_active,
            func.count(Ticket.id).label("total_assigned_tickets"),
            active,
            critical,
            high,
            _avg_resolution(session),
        )
        .select_from(Technician)
        .outerjoin(Ticket, Ticket.technician_id == Technician.id)
        .where(Technician.is_active == True)  # noqa: E712
        .group_by(Technician.id, Technician.first_name, Technician.last_name, Technician.email, Technician.is_active)
        # Triage ranking, not alphabetical
        .order_by(active.desc(), critical.desc(), high.desc(), Technician.id)
    )
    return [_shape(r) for r in session.exec(q).all()]


def technician_workload(session: Session, technician_id: int) -> dict[str, Any]:
    # No existence check: an unknown technician reports zeroed aggregates
    q = select(
        func.count(Ticket.id).label("total_assigned_tickets"),
        *_status_breakdown(),
        _critical(),
        _high(),
        _avg_resolution(session),
        _active(),
    ).where(Ticket.technician_id == technician_id)
    return _shape(session.exec(q).one())


def category_stats_overview(session: Session) -> list[dict[str, Any]]:
    total = func.count(Ticket.id).label("total_tickets")
    q = (
        select(
            Category.id.label("category_id"),
            Category.name.label("category_name"),
            Category.is_active,
            total,
            _active(),
            _critical(),
            _high(),
            _avg_resolution(session),
        )
        .select_from(Category)
        .outerjoin(Ticket, Ticket.category_id == Category.id)
        .where(Category.is_active == True)  # noqa: E712
        .group_by(Category.id, Category.name, Category.is_active)
        .order_by(total.desc(), Category.id)
    )
    return [_shape(r) for r in session.exec(q).all()]


def category_ticket_stats(session: Session, category_id: int) -> dict[str, Any]:
    q = select(
        func.count(Ticket.id).label("total_tickets"),
        *_status_breakdown(),
        _avg_resolution(session),
    ).where(Ticket.category_id == category_id)
    return _shape(session.exec(q).one())


def customer_ticket_stats(session: Session, customer_id: int) -> dict[str, Any]:
    q = select(
        func.count(Ticket.id).label("total_tickets"),
        *_status_breakdown(),
        _critical(),
        _high(),
        _avg_resolution(session),
    ).where(Ticket.customer_id == customer_id)
    return _shape(session.exec(q).one())
