from datetime import datetime
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

LaunchStatus = Literal["draft", "scheduled", "active", "completed", "failed"]

class LaunchCreate(BaseModel):
    productId: str = Field(min_length=1)
    scheduledAt: datetime
    options: Dict[str, Any] = Field(default_factory=dict)

class LaunchStatusUpdate(BaseModel):
    status: LaunchStatus

class LaunchScheduled(BaseModel):
    id: str
    status: LaunchStatus
    scheduledAt: datetime

class LaunchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    product_id: str
    platform: str
    platform_launch_id: str
    scheduled_at: datetime
    status: LaunchStatus
    options: Dict[str, Any]
    created_at: datetime
    updated_at: Optional[datetime] = None

class LaunchMetricsOut(BaseModel):
    launchId: str
    votes: int
    comments: int
    rank: Optional[int] = None
    engagement: float
    velocity: float
    timestamp: datetime
