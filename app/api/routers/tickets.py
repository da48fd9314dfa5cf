from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.api.deps import SessionDep
from app.domain.schemas import (
    CommentCreate, CommentRead, TicketCreate, TicketDetail, TicketPriority, TicketRead, TicketRow,
    TicketStatus, TicketUpdate,
)
from app.services.ticket_service import (
    add_comment, create_ticket, get_ticket_detail, list_tickets, update_ticket,
)

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.get("", response_model=list[TicketRow])
def get_tickets(
    status_filter: TicketStatus | None = Query(default=None, alias="status"),
    priority: TicketPriority | None = None,
    customer_id: int | None = None,
    technician_id: int | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    session: Session = Depends(SessionDep),
):
    return list_tickets(
        session,
        status=status_filter,
        priority=priority,
        customer_id=customer_id,
        technician_id=technician_id,
        page=page,
        limit=limit,
    )


@router.get("/{ticket_id}", response_model=TicketDetail)
def get_one_ticket(ticket_id: int, session: Session = Depends(SessionDep)):
    return get_ticket_detail(session, ticket_id)


@router.post("", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
def post_ticket(payload: TicketCreate, session: Session = Depends(SessionDep)):
    return create_ticket(
        session,
        customer_id=payload.customer_id,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        category_id=payload.category_id,
    )


@router.put("/{ticket_id}", response_model=TicketRead)
def put_ticket(ticket_id: int, payload: TicketUpdate, session: Session = Depends(SessionDep)):
    # Only the keys present in the body are applied
    return update_ticket(session, ticket_id, **payload.model_dump(exclude_unset=True))


@router.post("/{ticket_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def post_comment(ticket_id: int, payload: CommentCreate, session: Session = Depends(SessionDep)):
    return add_comment(
        session,
        ticket_id,
        technician_id=payload.technician_id,
        comment_text=payload.comment_text,
        is_internal=payload.is_internal,
    )
