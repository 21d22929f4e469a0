"""Timeline API endpoint."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from photomap.api.deps import get_current_user
from photomap.config import settings
from photomap.database import get_session
from photomap.models.user import User
from photomap.schemas.timeline import TimelinePhotoResponse, TimelineResponse
from photomap.services.access_scope import isoformat
from photomap.services.timeline_service import get_timeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/timeline", tags=["timeline"])


@router.get("", response_model=TimelineResponse)
def timeline(
    cursor: Optional[str] = Query(default=None),
    limit: int = Query(default=settings.timeline_page_size, ge=1, le=settings.timeline_max_page_size),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List photos from every album the user belongs to, newest first."""
    try:
        page = get_timeline(session, user.id, cursor=cursor, limit=limit)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid cursor")
    except SQLAlchemyError:
        logger.exception("Timeline query failed for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to load timeline")

    return TimelineResponse(
        photos=[
            TimelinePhotoResponse(
                id=p.id,
                album_id=p.album_id,
                album_title=p.album_title,
                thumb_key=p.thumb_key,
                display_key=p.display_key,
                width=p.width,
                height=p.height,
                date_taken=isoformat(p.date),
            )
            for p in page.photos
        ],
        next_cursor=page.next_cursor,
        has_more=page.has_more,
        month_counts=page.month_counts,
    )
