from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from .models import Notification

logger = logging.getLogger(__name__)

BROADCAST = "all"


def notify(
    db: Session,
    user_id: str,
    type: str,
    title: str,
    message: str,
    payload: dict[str, Any] | None = None,
) -> Notification:
    """Add a notification to the session. The caller commits."""
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        read=False,
        payload=payload,
    )
    db.add(notification)
    db.flush()
    logger.debug("Notification %s -> %s: %s", type, user_id, message)
    return notification


def notifications_for(db: Session, user_id: str) -> list[Notification]:
    # Newest first.
    return list(
        db.scalars(
            select(Notification)
            .where(or_(Notification.user_id == BROADCAST, Notification.user_id == user_id))
            .order_by(Notification.id.desc())
        ).all()
    )
