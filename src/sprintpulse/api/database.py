from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from sprintpulse.storage.postgres_adapter import PostgresAdapter


def get_postgres_adapter(request: Request) -> PostgresAdapter:
    return request.app.state.postgres


def get_db(request: Request) -> Generator[Session, None, None]:
    adapter = get_postgres_adapter(request)
    with adapter.get_session() as session:
        yield session
