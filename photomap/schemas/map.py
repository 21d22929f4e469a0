"""Map request/response schemas.

Field names follow the browser client's camelCase contract.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MapPointResponse(BaseModel):
    # Short keys keep payloads small when thousands of points come back
    id: str
    lat: float
    lng: float
    c: int  # photos in the bucket
    d: str  # newest capture date (ISO) or ""
    thumbs: list[str]
    k: str  # stable bucket key


class MapPointsResponse(BaseModel):
    points: list[MapPointResponse]


class ViewportPhotoResponse(CamelModel):
    id: str
    lat: float
    lng: float
    thumb_key: Optional[str]
    display_key: Optional[str]
    date_taken: Optional[str]
    filename: str
    width: Optional[int]
    height: Optional[int]
    album_id: str
    album_title: str


class ViewportPhotosResponse(BaseModel):
    photos: list[ViewportPhotoResponse]
    total: int


class DateRangeResponse(BaseModel):
    min: Optional[str]
    max: Optional[str]


class MapSettingsResponse(CamelModel):
    render_mode_threshold: int
    debounce_ms: int
    fly_to_max_zoom: int
