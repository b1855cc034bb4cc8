from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List

class ProductCreate(BaseModel):
    platform: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=1, max_length=200)
    tagline: str = Field(min_length=1, max_length=300)
    description: str = ""
    website: str = Field(min_length=1, max_length=500)
    media: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)

class ProductUpdate(BaseModel):
    # platform / platform_id are deliberately absent: they never change
    name: Optional[str] = Field(default=None, max_length=200)
    tagline: Optional[str] = Field(default=None, max_length=300)
    description: Optional[str] = None
    website: Optional[str] = Field(default=None, max_length=500)
    media: Optional[List[str]] = None
    topics: Optional[List[str]] = None

class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    platform: str
    platform_id: str
    name: str
    tagline: str
    description: str
    website: str
    url: Optional[str] = None
    media: List[str]
    topics: List[str]
    created_at: datetime
    updated_at: datetime | None = None

class ProductCreated(BaseModel):
    id: str
    platformId: str
    url: Optional[str] = None
