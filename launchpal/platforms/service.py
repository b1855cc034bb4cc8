from typing import Any
from sqlalchemy import select
from sqlalchemy.orm import Session

from launchpal.auth.models import User
from launchpal.platforms.models import PlatformCredential
from launchpal.platforms.registry import PLATFORMS, get_platform_adapter, is_known_platform
from launchpal.platforms.adapters.base import PlatformAdapter
from launchpal.shared.errors import PlatformNotConnected, UnsupportedPlatform
from launchpal.shared.logging import get_logger
from launchpal.usage.service import track_usage

logger = get_logger("platforms")

def get_credential(db: Session, user_id: str, platform: str) -> PlatformCredential | None:
    stmt = select(PlatformCredential).where(
        PlatformCredential.user_id == user_id, PlatformCredential.platform == platform
    )
    return db.scalars(stmt).first()

def connect(db: Session, user: User, platform: str, credentials: dict[str, Any]) -> dict:
    """
    Upsert the single credential row for (user, platform) and mark it active.
    Credentials are not checked against the platform here.
    """
    track_usage(db, user, "platforms.connect")
    if not is_known_platform(platform):
        raise UnsupportedPlatform(f"Unknown platform: {platform}")

    cred = get_credential(db, user.id, platform)
    if cred:
        cred.credentials = credentials
        cred.is_active = True
    else:
        cred = PlatformCredential(user_id=user.id, platform=platform, is_active=True)
        cred.credentials = credentials
        db.add(cred)
    db.commit()
    logger.info(f"connected {platform}", extra={"user_id": user.id, "platform": platform})
    return {"success": True, "message": f"Successfully connected to {platform}"}

def disconnect(db: Session, user: User, platform: str) -> dict:
    cred = get_credential(db, user.id, platform)
    if cred:
        cred.is_active = False
        db.commit()
        logger.info(f"disconnected {platform}", extra={"user_id": user.id, "platform": platform})
    return {"success": True}

def list_platforms(db: Session, user: User) -> list[dict]:
    creds = db.scalars(select(PlatformCredential).where(PlatformCredential.user_id == user.id)).all()
    active = {c.platform for c in creds if c.is_active}
    return [
        {
            "id": p["id"],
            "name": p["name"],
            "description": p["description"],
            "requiredCredentials": p["required_credentials"],
            "launchTips": p["launch_tips"],
            "connected": p["id"] in active,
        }
        for p in PLATFORMS
    ]

def require_active_credential(db: Session, user_id: str, platform: str) -> PlatformCredential:
    cred = get_credential(db, user_id, platform)
    if not cred or not cred.is_active:
        raise PlatformNotConnected(f"Platform {platform} not connected")
    return cred

def adapter_for(db: Session, user_id: str, platform: str, **kwargs) -> PlatformAdapter:
    """Active-credential check, then adapter construction."""
    cred = require_active_credential(db, user_id, platform)
    return get_platform_adapter(platform, cred.credentials, **kwargs)

async def trending(db: Session, user: User, platform: str, period: str = "day", limit: int = 10) -> list[dict]:
    track_usage(db, user, "platforms.trending")
    async with adapter_for(db, user.id, platform) as adapter:
        try:
            return await adapter.get_trending(period, limit)
        except NotImplementedError as e:
            raise UnsupportedPlatform(str(e))
