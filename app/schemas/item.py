from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class ItemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    main_category: str = Field(..., min_length=1, max_length=64)
    sub_category: str = ""
    location: str = Field(..., min_length=1, max_length=255)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contact_number: str = Field(..., min_length=1, max_length=32)
    contact1: Optional[str] = None
    contact2: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)
    video_url: Optional[str] = None
    expires_at: Optional[datetime] = None


class ItemResponse(BaseModel):
    id: str
    title: str
    description: str
    main_category: str
    sub_category: str
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contact_number: str
    contact1: Optional[str] = None
    contact2: Optional[str] = None
    owner_id: str
    is_active: bool
    image_urls: List[str] = Field(default_factory=list)
    video_url: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ItemDeleteRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=255)
