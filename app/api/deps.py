from collections.abc import Iterator

from fastapi import Request
from sqlmodel import Session

from app.db.engine import Database


def get_database(request: Request) -> Database:
    return request.app.state.database


def SessionDep(request: Request) -> Iterator[Session]:
    # One session per request, taken from the app's Database context
    with get_database(request).session() as session:
        yield session
