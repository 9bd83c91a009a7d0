# wheelstore/db/session.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .url import get_sqlalchemy_url


def build_engine(url: Optional[str] = None) -> Engine:
    url = url or get_sqlalchemy_url()
    connect_args = {}
    if url.startswith("sqlite"):
        # Sessions are handed to worker threads via asyncio.to_thread
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=False, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    db = factory()
    try:
        yield db
    finally:
        db.close()


def get_db(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency: a session from the factory the app lifespan owns."""
    with session_scope(request.app.state.session_factory) as db:
        yield db
