from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from launchpal.shared.db import Base
import uuid, json

def _id32() -> str:
    return uuid.uuid4().hex

LAUNCH_STATUSES = ("draft", "scheduled", "active", "completed", "failed")

class Launch(Base):
    __tablename__ = "launches"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    user_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[str] = mapped_column(String(32), ForeignKey("products.id"), index=True)
    platform: Mapped[str] = mapped_column(String(32))
    platform_launch_id: Mapped[str] = mapped_column(String(128))
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    status: Mapped[str] = mapped_column(String(16), default="draft", index=True)
    options_json: Mapped[str] = mapped_column(Text, default="{}")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def options(self) -> dict:
        try:
            return json.loads(self.options_json or "{}")
        except json.JSONDecodeError:
            return {}

    @options.setter
    def options(self, val: dict):
        self.options_json = json.dumps(val or {})
