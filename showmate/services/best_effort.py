"""
Best-effort workflow steps.

Steps run after a workflow's core write (attaching events, posting to the
role board, notifying, emailing) must not abort or undo that write. A
failure is logged, the session is rolled back so later steps can still
use it, and the workflow carries on.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@contextmanager
def best_effort(db: Session, step: str, **identifiers) -> Iterator[None]:
    """
    Run a block whose failure is logged and swallowed.

    Usage:
        with best_effort(self.db, "create role post", project_id=project_id):
            self.post_repo.create(post)
    """
    try:
        yield
    except Exception:
        db.rollback()
        details = ", ".join(f"{key}={value}" for key, value in identifiers.items())
        logger.exception("Best-effort step '%s' failed (%s)", step, details)
