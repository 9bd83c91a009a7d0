# wheelstore/db/__init__.py
from .session import build_engine, build_session_factory, get_db, session_scope  # noqa: F401
from .url import get_sqlalchemy_url  # noqa: F401
