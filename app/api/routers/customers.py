from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.api.deps import SessionDep
from app.domain.schemas import CustomerCreate, CustomerDetail, CustomerPage, CustomerRead, CustomerTicketStats
from app.services import customer_service
from app.services.workload_service import customer_ticket_stats

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("", response_model=CustomerPage)
def get_customers(
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    session: Session = Depends(SessionDep),
):
    return customer_service.list_customers(session, search=search, page=page, limit=limit)


@router.get("/{customer_id}", response_model=CustomerDetail)
def get_customer(customer_id: int, session: Session = Depends(SessionDep)):
    return customer_service.get_customer_detail(session, customer_id)


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def post_customer(payload: CustomerCreate, session: Session = Depends(SessionDep)):
    return customer_service.create_customer(session, **payload.model_dump())


@router.put("/{customer_id}", response_model=CustomerRead)
def put_customer(customer_id: int, payload: CustomerCreate, session: Session = Depends(SessionDep)):
    return customer_service.update_customer(session, customer_id, **payload.model_dump())


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, session: Session = Depends(SessionDep)):
    outcome = customer_service.delete_customer(session, customer_id)
    return {"message": outcome.message, "customer": outcome.record}


@router.get("/{customer_id}/tickets/stats", response_model=CustomerTicketStats)
def get_customer_ticket_stats(customer_id: int, session: Session = Depends(SessionDep)):
    return customer_ticket_stats(session, customer_id)
