import logging
import sys
from typing import Iterator, Optional

import uvicorn
from fastapi import Depends, FastAPI, Form, Request, Response
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .db import StoreUnavailableError, build_engine, session_scope
from .rendering import STATIC_DIR, render_guestbook
from .services.entries import list_entries, submit_entry


logger = logging.getLogger("guestbook")


def _configure_logging(settings: Settings) -> None:
    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_session(request: Request) -> Iterator[Session]:
    """Open the per-request store session; fails fast if the store is unreachable."""

    with session_scope(request.app.state.engine) as session:
        yield session


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings)

    if settings.app_env == "production" and settings.uses_placeholder_password:
        logger.warning("DB_PASSWORD is still the placeholder value; set real store credentials")

    app = FastAPI(title="Guestbook", version="0.1.0", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.engine = build_engine(settings)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> PlainTextResponse:
        return PlainTextResponse(f"Connection failed: {exc}", status_code=500)

    @app.get("/", response_class=HTMLResponse)
    def show_guestbook(request: Request, session: Session = Depends(get_session)) -> Response:
        return render_guestbook(request, list_entries(session))

    @app.post("/", response_class=HTMLResponse)
    def sign_guestbook(
        request: Request,
        name: str = Form(""),
        message: str = Form(""),
        session: Session = Depends(get_session),
    ) -> Response:
        result = submit_entry(session, name, message)
        return render_guestbook(request, list_entries(session), result)

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
