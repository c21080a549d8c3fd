"""Recycle-bin state machine.

    Active (expiry_date NULL) --move_to_recycle--> Recycled (expiry_date set)
    Recycled --restore--> Active
    Recycled --purge--> gone
    Active --purge(force=True)--> gone

There is no stored state beyond ``expiry_date``; "recycled" listings are the
query compiler's ``expiry_date IS NOT NULL`` clause.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..database.schema import SnippetRow
from ..errors import InvalidStateError, SnippetNotFoundError
from ..utils.time import utc_now

logger = logging.getLogger(__name__)


def load_owned(session: Session, snippet_id: int, owner_id: str) -> SnippetRow:
    """Fetch a snippet owned by ``owner_id``; foreign snippets count as missing."""
    row = session.get(SnippetRow, snippet_id)
    if row is None or row.user_id != owner_id:
        raise SnippetNotFoundError(snippet_id)
    return row


def expiry_for(recycled_at: datetime) -> datetime:
    return recycled_at + timedelta(days=settings.retention_days)


def move_to_recycle(session: Session, snippet_id: int, owner_id: str, now: Optional[datetime] = None) -> int:
    row = load_owned(session, snippet_id, owner_id)
    if row.expiry_date is not None:
        raise InvalidStateError(snippet_id, "Snippet already moved to recycle bin")

    row.expiry_date = expiry_for(now or utc_now())
    session.commit()
    logger.info(f"Snippet {snippet_id} moved to recycle bin, expires {row.expiry_date.isoformat()}")
    return row.id


def restore(session: Session, snippet_id: int, owner_id: str) -> int:
    row = load_owned(session, snippet_id, owner_id)
    if row.expiry_date is None:
        raise InvalidStateError(snippet_id, "Snippet not in recycle bin")

    row.expiry_date = None
    session.commit()
    logger.info(f"Snippet {snippet_id} restored from recycle bin")
    return row.id


def purge(session: Session, snippet_id: int, owner_id: str, force: bool = False) -> int:
    """Delete permanently. Without ``force`` only recycled snippets qualify."""
    row = load_owned(session, snippet_id, owner_id)
    if row.expiry_date is None and not force:
        raise InvalidStateError(snippet_id, "Snippet must be in recycle bin before permanent deletion")

    session.delete(row)
    session.commit()
    logger.info(f"Snippet {snippet_id} purged (force={force})")
    return snippet_id


def purge_expired(session: Session, now: Optional[datetime] = None) -> list[int]:
    """Delete every recycled snippet whose retention window has passed.

    Nothing in the service calls this on a timer; it is the entry point for
    an external scheduled job.
    """
    now = now or utc_now()
    rows = session.scalars(
        select(SnippetRow).where(SnippetRow.expiry_date.is_not(None), SnippetRow.expiry_date <= now)
    ).all()
    purged = [row.id for row in rows]
    for row in rows:
        session.delete(row)
    session.commit()
    if purged:
        logger.info(f"Purged {len(purged)} expired snippets")
    return purged

