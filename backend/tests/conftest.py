import os
import sys
from pathlib import Path

import pytest


BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

# guestbook.main builds an engine at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")


@pytest.fixture(autouse=True)
def _ensure_test_env(monkeypatch, tmp_path):
    """Point every test at its own SQLite file and reset the settings cache."""

    from guestbook.config import get_settings

    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'guestbook.db'}")

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def engine():
    from guestbook.config import get_settings
    from guestbook.db import build_engine
    from guestbook.models import Base

    engine = build_engine(get_settings())
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    from guestbook.db import session_scope

    with session_scope(engine) as session:
        yield session
