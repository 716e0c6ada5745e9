"""Validate, store and list guestbook entries."""

import logging
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import store_error_text
from ..models import Message


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionSaved:
    """The entry was written."""

    kind: ClassVar[str] = "success"

    entry_id: int

    @property
    def banner(self) -> str:
        return "Your message has been saved successfully!"


@dataclass(frozen=True)
class SubmissionInvalid:
    """Name or message was blank after trimming; nothing was written."""

    kind: ClassVar[str] = "error"

    @property
    def banner(self) -> str:
        return "Please fill in both name and message fields."


@dataclass(frozen=True)
class SubmissionFailed:
    """The store rejected the insert; ``detail`` is its own error text."""

    kind: ClassVar[str] = "error"

    detail: str

    @property
    def banner(self) -> str:
        return f"Error saving message: {self.detail}"


SubmissionResult = Union[SubmissionSaved, SubmissionInvalid, SubmissionFailed]


def submit_entry(session: Session, name: Optional[str], message: Optional[str]) -> SubmissionResult:
    """Trim and validate a form submission, then insert it as one row."""

    name = (name or "").strip()
    message = (message or "").strip()
    if not name or not message:
        logger.info("Rejected guestbook submission with a blank field")
        return SubmissionInvalid()

    entry = Message(name=name, message=message)
    try:
        session.add(entry)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        detail = store_error_text(exc)
        logger.warning("Failed to save guestbook entry: %s", detail)
        return SubmissionFailed(detail=detail)

    logger.info("Saved guestbook entry id=%s", entry.id)
    return SubmissionSaved(entry_id=entry.id)


def list_entries(session: Session) -> List[Message]:
    """All entries, newest first."""

    stmt = select(Message).order_by(Message.created_at.desc(), Message.id.desc())
    return list(session.scalars(stmt))
