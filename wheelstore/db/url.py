# wheelstore/db/url.py
from __future__ import annotations

from decouple import config

from wheelstore.settings import settings


def _strip_driver(url: str) -> str:
    if url.startswith("postgres://"):
        return "postgresql://" + url.split("://", 1)[1]
    if url.startswith("postgresql+"):
        return "postgresql://" + url.split("://", 1)[1]
    return url


def get_sqlalchemy_url() -> str:
    """Return a SQLAlchemy-compatible URL. Driverless is fine."""
    return _strip_driver(config("DATABASE_URL", default=settings.DATABASE_URL))
