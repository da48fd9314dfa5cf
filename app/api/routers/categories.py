from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.api.deps import SessionDep
from app.domain.schemas import CategoryCreate, CategoryDetail, CategoryRead, CategoryStatsRow, CategoryUpdate
from app.services import category_service
from app.services.workload_service import category_stats_overview

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/stats/overview", response_model=list[CategoryStatsRow])
def get_stats_overview(session: Session = Depends(SessionDep)):
    return category_stats_overview(session)


@router.get("", response_model=list[CategoryRead])
def get_categories(active_only: bool = True, session: Session = Depends(SessionDep)):
    return category_service.list_categories(session, active_only=active_only)


@router.get("/{category_id}", response_model=CategoryDetail)
def get_category(category_id: int, session: Session = Depends(SessionDep)):
    return category_service.get_category_detail(session, category_id)


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def post_category(payload: CategoryCreate, session: Session = Depends(SessionDep)):
    return category_service.create_category(session, name=payload.name, description=payload.description)


@router.put("/{category_id}", response_model=CategoryRead)
def put_category(category_id: int, payload: CategoryUpdate, session: Session = Depends(SessionDep)):
    return category_service.update_category(session, category_id, **payload.model_dump())


@router.delete("/{category_id}")
def delete_category(category_id: int, session: Session = Depends(SessionDep)):
    outcome = category_service.delete_category(session, category_id)
    return {"message": outcome.message, "category": outcome.record}
