from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
import uuid, json
from launchpal.shared.db import Base

def _id32() -> str:
    return uuid.uuid4().hex

class PlatformCredential(Base):
    __tablename__ = "platform_credentials"
    __table_args__ = (UniqueConstraint("user_id", "platform", name="uq_credential_user_platform"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    user_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    platform: Mapped[str] = mapped_column(String(32))
    # opaque per-platform secret bundle, stored as JSON text
    credentials_json: Mapped[str] = mapped_column(Text, default="{}")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def credentials(self) -> dict:
        try:
            return json.loads(self.credentials_json or "{}")
        except json.JSONDecodeError:
            return {}

    @credentials.setter
    def credentials(self, val: dict):
        self.credentials_json = json.dumps(val or {})
