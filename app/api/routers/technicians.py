from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.api.deps import SessionDep
from app.domain.schemas import (
    TechnicianCreate, TechnicianDetail, TechnicianPage, TechnicianRead, TechnicianUpdate,
    TechnicianWorkload, TechnicianWorkloadRow,
)
from app.services import technician_service
from app.services.workload_service import technician_workload, technician_workload_summary

router = APIRouter(prefix="/technicians", tags=["Technicians"])


# Declared before /{technician_id} so "workload" is not parsed as an id
@router.get("/workload/summary", response_model=list[TechnicianWorkloadRow])
def get_workload_summary(session: Session = Depends(SessionDep)):
    return technician_workload_summary(session)


@router.get("", response_model=TechnicianPage)
def get_technicians(
    search: str | None = None,
    active_only: bool = True,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    session: Session = Depends(SessionDep),
):
    return technician_service.list_technicians(
        session, search=search, active_only=active_only, page=page, limit=limit
    )


@router.get("/{technician_id}", response_model=TechnicianDetail)
def get_technician(technician_id: int, session: Session = Depends(SessionDep)):
    return technician_service.get_technician_detail(session, technician_id)


@router.post("", response_model=TechnicianRead, status_code=status.HTTP_201_CREATED)
def post_technician(payload: TechnicianCreate, session: Session = Depends(SessionDep)):
    return technician_service.create_technician(session, **payload.model_dump())


@router.put("/{technician_id}", response_model=TechnicianRead)
def put_technician(technician_id: int, payload: TechnicianUpdate, session: Session = Depends(SessionDep)):
    return technician_service.update_technician(session, technician_id, **payload.model_dump())


@router.delete("/{technician_id}")
def delete_technician(technician_id: int, session: Session = Depends(SessionDep)):
    outcome = technician_service.deactivate_technician(session, technician_id)
    return {"message": outcome.message, "technician": outcome.record}


@router.get("/{technician_id}/workload", response_model=TechnicianWorkload)
def get_technician_workload(technician_id: int, session: Session = Depends(SessionDep)):
    return technician_workload(session, technician_id)
