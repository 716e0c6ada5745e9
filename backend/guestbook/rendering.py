import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from fastapi import Request, Response
from fastapi.templating import Jinja2Templates
from markupsafe import Markup, escape

from .models import Message
from .services.entries import SubmissionResult


PACKAGE_ROOT = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_ROOT / "templates"
STATIC_DIR = PACKAGE_ROOT / "static"

_LINE_BREAK = re.compile(r"\r\n|\n\r|\n|\r")


def nl2br(value: str) -> Markup:
    """Escape ``value`` and insert ``<br />`` before every line break."""

    escaped = str(escape(value))
    return Markup(_LINE_BREAK.sub(lambda match: "<br />" + match.group(0), escaped))


def format_timestamp(value: datetime) -> str:
    """Long-form display date, e.g. ``September 4, 2025, 3:15 pm``."""

    hour = value.hour % 12 or 12
    meridiem = "am" if value.hour < 12 else "pm"
    return f"{value:%B} {value.day}, {value.year}, {hour}:{value:%M} {meridiem}"


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["nl2br"] = nl2br
templates.env.filters["timestamp"] = format_timestamp


def render_guestbook(
    request: Request,
    entries: Sequence[Message],
    result: Optional[SubmissionResult] = None,
) -> Response:
    return templates.TemplateResponse(
        request,
        "index.html",
        {"entries": entries, "result": result},
    )
