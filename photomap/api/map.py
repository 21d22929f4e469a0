"""Map API endpoints - aggregated points, viewport photos, date range."""

import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from photomap.api.deps import get_current_user, get_viewport_bounds
from photomap.config import settings
from photomap.database import get_session
from photomap.models.user import User
from photomap.schemas.map import (
    DateRangeResponse,
    MapPointResponse,
    MapPointsResponse,
    MapSettingsResponse,
    ViewportPhotoResponse,
    ViewportPhotosResponse,
)
from photomap.services.access_scope import Bounds, isoformat
from photomap.services.map_service import (
    MapPoint,
    ViewportPhoto,
    get_date_range,
    get_photos_in_viewport,
    get_points,
)
from photomap.services.render_strategy import FLY_TO_MAX_ZOOM

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/map", tags=["map"])


def _private_cache(response: Response) -> None:
    # Results are permission-scoped; shared caches must never store them
    response.headers["Cache-Control"] = f"private, max-age={settings.map_cache_max_age}"


def _point_to_response(p: MapPoint) -> MapPointResponse:
    return MapPointResponse(
        id=p.id,
        lat=p.lat,
        lng=p.lng,
        c=p.count,
        d=isoformat(p.most_recent_date) or "",
        thumbs=p.thumb_keys,
        k=p.key,
    )


def _photo_to_response(p: ViewportPhoto) -> ViewportPhotoResponse:
    return ViewportPhotoResponse(
        id=p.id,
        lat=p.lat,
        lng=p.lng,
        thumb_key=p.thumb_key,
        display_key=p.display_key,
        date_taken=isoformat(p.taken_at),
        filename=p.filename,
        width=p.width,
        height=p.height,
        album_id=p.album_id,
        album_title=p.album_title,
    )


@router.get("/points", response_model=MapPointsResponse)
def map_points(
    response: Response,
    bounds: Bounds = Depends(get_viewport_bounds),
    zoom: float = Query(default=5, ge=0, le=24),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    since: Optional[datetime] = Query(default=None),
    until: Optional[datetime] = Query(default=None),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Grouped photo points for the viewport, densest buckets first."""
    started = time.perf_counter()
    try:
        points = get_points(
            session,
            user.id,
            bounds,
            zoom,
            start_date=start_date or since,
            end_date=end_date or until,
        )
    except SQLAlchemyError:
        logger.exception("Map points query failed for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to load map points")
    db_ms = round((time.perf_counter() - started) * 1000)

    body = MapPointsResponse(points=[_point_to_response(p) for p in points])

    total_ms = round((time.perf_counter() - started) * 1000)
    response.headers["Server-Timing"] = f"db;dur={db_ms}, total;dur={total_ms}"
    _private_cache(response)
    return body


@router.get("/photos", response_model=ViewportPhotosResponse)
def map_photos(
    response: Response,
    bounds: Bounds = Depends(get_viewport_bounds),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=settings.viewport_page_size, ge=1, le=settings.viewport_max_page_size),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Individual photos in the viewport for the sidebar list, newest first."""
    try:
        page = get_photos_in_viewport(session, user.id, bounds, offset=offset, limit=limit)
    except SQLAlchemyError:
        logger.exception("Viewport photos query failed for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to load photos")

    _private_cache(response)
    return ViewportPhotosResponse(
        photos=[_photo_to_response(p) for p in page.photos],
        total=page.total,
    )


@router.get("/date-range", response_model=DateRangeResponse)
def map_date_range(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Capture-date bounds of the user's geotagged photos, for the time slider."""
    try:
        date_range = get_date_range(session, user.id)
    except SQLAlchemyError:
        logger.exception("Map date range query failed for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to load date range")

    return DateRangeResponse(min=isoformat(date_range.min), max=isoformat(date_range.max))


@router.get("/settings", response_model=MapSettingsResponse)
def map_settings(user: User = Depends(get_current_user)):
    """Client tuning shared with the browser map."""
    return MapSettingsResponse(
        render_mode_threshold=settings.render_mode_threshold,
        debounce_ms=settings.map_debounce_ms,
        fly_to_max_zoom=FLY_TO_MAX_ZOOM,
    )
