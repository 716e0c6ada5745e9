import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from .config import Settings


logger = logging.getLogger(__name__)


class StoreUnavailableError(RuntimeError):
    """Raised when no connection to the message store can be established."""


def store_error_text(exc: SQLAlchemyError) -> str:
    """Return the driver's own error text, without SQLAlchemy's statement dump."""

    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def encoding_connect_args(url: URL) -> Dict[str, Any]:
    """Driver arguments that make the connection use 4-byte-safe UTF-8."""

    backend = url.get_backend_name()
    if backend == "mysql" and "charset" not in url.query:
        return {"charset": "utf8mb4"}
    if backend == "postgresql" and "client_encoding" not in url.query:
        return {"client_encoding": "utf8"}
    return {}


def build_engine(settings: Settings) -> Engine:
    url = make_url(settings.database_url)
    # one connection per request, opened and closed explicitly
    return create_engine(
        url,
        echo=settings.sql_echo,
        future=True,
        poolclass=NullPool,
        connect_args=encoding_connect_args(url),
    )


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    try:
        connection = engine.connect()
    except SQLAlchemyError as exc:
        detail = store_error_text(exc)
        logger.error("Connection to message store failed: %s", detail)
        raise StoreUnavailableError(detail) from exc

    session = Session(bind=connection, autoflush=False, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        connection.close()
